"""mcpunify — reconcile a team MCP server list into every host application's config."""

__version__ = "0.1.0"

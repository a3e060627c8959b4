"""Salary Calc MCP server."""

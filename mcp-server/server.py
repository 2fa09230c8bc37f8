#!/usr/bin/env python3
"""MCP Server for Retirement Planner.

This server exposes retirement projections and financial health scores as
MCP tools, allowing AI assistants to answer questions about a user's
retirement savings.
"""

import os
import sys
import json
import asyncio
import logging
from typing import Any

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from tools import MultiProfileTools

logger = logging.getLogger(__name__)


# Create the MCP server
server = Server("retirement-planner")

# Global tools instance (initialized on startup)
tools: MultiProfileTools | None = None


def get_tools() -> MultiProfileTools:
    """Get or initialize the tools instance."""
    global tools
    if tools is None:
        # Default profile can be set via RETIREMENT_PLANNER_PROFILE env var
        default_profile = os.environ.get('RETIREMENT_PLANNER_PROFILE')
        base_path = os.path.join(os.path.dirname(__file__), '..')
        tools = MultiProfileTools(base_path, default_profile)
    return tools


# Common profile parameter schema
PROFILE_PARAM = {
    "type": "string",
    "description": "The profile name (folder in input-parameters). If not specified, uses the default profile. Use list_profiles to see available profiles."
}

FACTOR_PARAM = {
    "type": "string",
    "enum": [
        "savingsRate", "retirementReadiness", "timeHorizon", "riskAlignment",
        "diversification", "taxEfficiency", "emergencyFund", "debtManagement"
    ],
    "description": "The health score factor to inspect"
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available retirement planning tools."""
    return [
        Tool(
            name="list_profiles",
            description="List all available retirement profiles with planning type and ages. Use this to see which profiles can be queried.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="reload_profiles",
            description="Reload all retirement profiles from disk and clear cached results. Use this after adding, modifying, or removing profile.json files without restarting the server.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="get_projection",
            description="Get the year-by-year savings projection from current age to retirement age. Each point has nominal and inflation-adjusted totals, per-bucket balances (pension, training fund, portfolio, real estate, crypto) and yearly contributions.",
            inputSchema={
                "type": "object",
                "properties": {
                    "compounding": {
                        "type": "string",
                        "enum": ["monthly", "legacy"],
                        "description": "monthly compounds 12 times per year (default); legacy applies one monthly step per year"
                    },
                    "series": {
                        "type": "string",
                        "enum": ["primary", "partner", "combined"],
                        "description": "Optional: return only this series. If omitted, returns all three."
                    },
                    "profile": PROFILE_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="get_health_report",
            description="Get the 0-100 financial health score with all eight weighted factors, suggestions, missing data, peer comparison and input validation.",
            inputSchema={
                "type": "object",
                "properties": {
                    "profile": PROFILE_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="get_factor_details",
            description="Get the score, status and calculation details for a single health score factor, along with the fields it was missing and its suggestion.",
            inputSchema={
                "type": "object",
                "properties": {
                    "factor": FACTOR_PARAM,
                    "profile": PROFILE_PARAM
                },
                "required": ["factor"]
            }
        ),
        Tool(
            name="get_suggestions",
            description="Get improvement suggestions ordered from most to least impactful.",
            inputSchema={
                "type": "object",
                "properties": {
                    "priority": {
                        "type": "string",
                        "enum": ["critical", "high", "medium", "low"],
                        "description": "Optional: only return suggestions with this priority"
                    },
                    "profile": PROFILE_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="diagnose_fields",
            description="Show which raw input key (and which partner) supplied each canonical field. Use this to understand why a factor reports missing data.",
            inputSchema={
                "type": "object",
                "properties": {
                    "only_missing": {
                        "type": "boolean",
                        "description": "Optional: only list fields that could not be resolved"
                    },
                    "profile": PROFILE_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="get_retirement_income",
            description="Get the monthly income the projected savings support at retirement (nominal and in today's money) and the salary replacement ratio.",
            inputSchema={
                "type": "object",
                "properties": {
                    "profile": PROFILE_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="compare_profiles",
            description="Compare two retirement profiles on health score, savings at retirement and retirement income. Returns per-metric winners and an overall winner.",
            inputSchema={
                "type": "object",
                "properties": {
                    "profile1": {
                        "type": "string",
                        "description": "First profile name to compare"
                    },
                    "profile2": {
                        "type": "string",
                        "description": "Second profile name to compare"
                    },
                    "metrics": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Optional: specific metrics to compare. Options: 'total_score', 'nominal_at_retirement', 'real_at_retirement', 'monthly_income_real', 'savings_today'. If not specified, compares all metrics."
                    }
                },
                "required": ["profile1", "profile2"]
            }
        )
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        rp_tools = get_tools()
        profile = arguments.get("profile")

        if name == "list_profiles":
            result = rp_tools.list_profiles()
        elif name == "reload_profiles":
            result = rp_tools.reload_profiles()
        elif name == "get_projection":
            result = rp_tools.get_projection(
                arguments.get("compounding", "monthly"),
                arguments.get("series"),
                profile
            )
        elif name == "get_health_report":
            result = rp_tools.get_health_report(profile)
        elif name == "get_factor_details":
            result = rp_tools.get_factor_details(arguments["factor"], profile)
        elif name == "get_suggestions":
            result = rp_tools.get_suggestions(arguments.get("priority"), profile)
        elif name == "diagnose_fields":
            result = rp_tools.diagnose_fields(bool(arguments.get("only_missing", False)), profile)
        elif name == "get_retirement_income":
            result = rp_tools.get_retirement_income(profile)
        elif name == "compare_profiles":
            result = rp_tools.compare_profiles(
                arguments["profile1"],
                arguments["profile2"],
                arguments.get("metrics")
            )
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]
    except Exception as e:
        logger.warning("Tool %s failed: %s", name, e)
        return [TextContent(
            type="text",
            text=json.dumps({"error": str(e)}, indent=2)
        )]


async def main():
    """Run the MCP server."""
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(level=logging.INFO, stream=sys.stderr,
                        format='%(levelname)s %(name)s: %(message)s')
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    asyncio.run(main())

"""Pytest configuration for the retirement-planner test suite."""

# The MCP handlers are coroutines; pytest-asyncio runs them
pytest_plugins = ('pytest_asyncio',)


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: coroutine test for the MCP server handlers"
    )

from setuptools import setup, find_packages

setup(
    name="workflow-mcp",
    version="0.1.0",
    description="MCP server for defining and running nested AI workflows",
    author="MCP Team",
    packages=find_packages(include=["config*", "workflow_tools*", "plugins*", "server*"]),
    install_requires=[
        "mcp>=1.2.0,<2",
        "anyio>=4.0.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
        "click>=8.0.0",
        "starlette>=0.27.0",
        "uvicorn>=0.23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "black>=22.0.0",
            "isort>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "workflow-mcp=server.main:main",
        ],
    },
    python_requires=">=3.10",
)

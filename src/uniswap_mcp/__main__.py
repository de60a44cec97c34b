"""Run the server with: python -m uniswap_mcp"""

from uniswap_mcp.main import main

main()

"""
Infrastructure layer package.

HTTP transport, WS-Management protocol, configuration files and logging.
"""

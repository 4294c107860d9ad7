"""Configuration management for cmdgate.

Runtime settings are Pydantic models loaded from the environment; the
route table is loaded from a YAML file and validated into CommandSpecs.
"""

from cmdgate.config.routes import RouteTable, RouteTableError, load_route_table
from cmdgate.config.settings import Settings, load_settings

__all__ = ["RouteTable", "RouteTableError", "Settings", "load_route_table", "load_settings"]

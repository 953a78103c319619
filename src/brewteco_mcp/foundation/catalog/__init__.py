"""Declarative tool catalog with typed parameter contracts."""

from .catalog import CATALOG, PERIODS, PRODUCT_ORDERS, STORES, Catalog, get_contract, list_tools
from .contract import ConditionalRequirement, ToolContract
from .params import DATE_PATTERN, DateParam, EnumParam, NumberParam, Param, StringArrayParam, StringParam

__all__ = [
    "CATALOG", "Catalog", "list_tools", "get_contract",
    "STORES", "PERIODS", "PRODUCT_ORDERS",
    "ToolContract", "ConditionalRequirement",
    "Param", "StringParam", "DateParam", "NumberParam", "EnumParam", "StringArrayParam", "DATE_PATTERN",
]

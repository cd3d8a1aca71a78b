"""Volcano-style operators applied to reader rows"""

from weatherstream.operators.base import Operator
from weatherstream.operators.filter import Filter
from weatherstream.operators.limit import Limit
from weatherstream.operators.orderby import OrderByOperator
from weatherstream.operators.project import Project
from weatherstream.operators.scan import Scan

__all__ = ["Operator", "Scan", "Filter", "Project", "Limit", "OrderByOperator"]

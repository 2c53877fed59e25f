"""
CTP Calc - Integer Expression Parser & Line-Protocol Calculator Service

Evaluates infix integer expressions (``+ - * /``, parentheses, unary minus)
with a shunting-yard parser, and serves them over the CTP line protocol,
an HTTP facade, and a command-line interface.
"""

__version__ = "1.0.0"
__author__ = "CTP Calc Team"

from ctp_calc.models import ParseOutcome, Status
from ctp_calc.parser import evaluate, parse_expression

__all__ = ["ParseOutcome", "Status", "evaluate", "parse_expression"]

"""
BitFit module: fitness calculators, benchmark tables, reports and guides.
"""
from .Assessments import AssessmentEngine
from .reports import build_report

__all__ = ['AssessmentEngine', 'build_report']

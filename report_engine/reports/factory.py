"""Report type -> compiler registry."""

from typing import Dict, Type

from report_engine.catalog.enums import Dialect, ReportType
from report_engine.core.exceptions import UnknownReportTypeError
from report_engine.extra_fields.resolver import WarehouseInspector
from report_engine.reports.assets import AssetsCompiler
from report_engine.reports.base import ReportCompiler
from report_engine.reports.classroom import ClassroomCompiler
from report_engine.reports.enrollment_time import EnrollmentTimeCompiler
from report_engine.reports.learning_plans import LearningPlanStatisticsCompiler
from report_engine.reports.surveys import SurveysCompiler
from report_engine.reports.users_courses import UsersCoursesCompiler
from report_engine.services.protocol import MetadataService

# Compiler Registry
REPORT_COMPILERS: Dict[ReportType, Type[ReportCompiler]] = {}


def register_compiler(compiler_class: Type[ReportCompiler]):
    """Register a compiler under its report type."""
    REPORT_COMPILERS[compiler_class.report_type] = compiler_class


def get_compiler_class(report_type) -> Type[ReportCompiler]:
    try:
        return REPORT_COMPILERS[ReportType(report_type)]
    except (KeyError, ValueError):
        raise UnknownReportTypeError(report_type)


def get_compiler(
    report_type,
    dialect: Dialect,
    metadata: MetadataService,
    inspector: WarehouseInspector = None,
) -> ReportCompiler:
    """Instantiate the compiler of ``report_type``; raises UnknownReportTypeError."""
    compiler_class = get_compiler_class(report_type)
    return compiler_class(dialect, metadata, inspector or WarehouseInspector())


register_compiler(UsersCoursesCompiler)
register_compiler(ClassroomCompiler)
register_compiler(SurveysCompiler)
register_compiler(AssetsCompiler)
register_compiler(LearningPlanStatisticsCompiler)
register_compiler(EnrollmentTimeCompiler)

"""Surveys - Individual Answers: one row per user, course and survey question."""

from typing import Dict

from report_engine.catalog.enums import CourseuserLevels, LOQuestTypes, LOTypes, ReportType
from report_engine.catalog.fields import ExtraFieldEntity, FieldId, FieldTranslation
from report_engine.catalog.tables import TableAliases as A
from report_engine.catalog.tables import Tables as T
from report_engine.extra_fields.resolver import ResolvedExtraField
from report_engine.filters.calculators import groups_filter
from report_engine.query.dates import build_date_filter, compose_date_options
from report_engine.reports.base import FieldBuilder, ReportCompiler, default_date_option
from report_engine.reports.common_fields import (
    COURSE_BUILDERS,
    CU,
    LC,
    LCU,
    USER_BUILDERS,
    _join_on,
    course_extra_field,
)
from report_engine.reports.context import CompileContext
from report_engine.reports.schemas import CoursesFilter, SurveysFilter, UsersFilter
from report_engine.reports.session import SessionContext
from report_engine.reports.users_courses import course_subquery

CG = A.CORE_GROUP.value
CGM = A.CORE_GROUP_MEMBERS.value
COCT = A.CORE_ORG_CHART_TREE.value
COC = A.CORE_ORG_CHART.value
LO = A.LEARNING_ORGANIZATION.value
LCO = A.LEARNING_COMMONTRACK.value
LPT = A.LEARNING_POLLTRACK.value
LP = A.LEARNING_POLL.value
LPTA = A.LEARNING_POLLTRACK_ANSWER.value
LPQ = A.LEARNING_POLLQUEST.value
LPQA = A.LEARNING_POLLQUEST_ANSWER.value

CHOICE_TYPES = (
    LOQuestTypes.CHOICE.value,
    LOQuestTypes.CHOICE_MULTIPLE.value,
    LOQuestTypes.INLINE_CHOICE.value,
    LOQuestTypes.LIKERT_SCALE.value,
)

USER_FIELDS = (
    FieldId.USER_USERID,
    FieldId.USER_FIRSTNAME,
    FieldId.USER_LASTNAME,
    FieldId.USER_FULLNAME,
    FieldId.USER_EMAIL,
)

COURSE_FIELDS = (
    FieldId.COURSE_ID,
    FieldId.COURSE_CODE,
    FieldId.COURSE_NAME,
    FieldId.COURSE_TYPE,
)


def pollquest_cte(ctx: CompileContext) -> str:
    """
    Survey questions with each likert-scale question expanded to one row per
    statement, titled ``<question> - <statement>``.
    """
    name = ctx.dialect.column_name
    columns = ("id_quest", "id_poll", "id_category", "type_quest", "title_quest", "sequence", "page", "mandatory")
    plain = ", ".join(name(column) for column in columns)
    likert = ", ".join(
        f"CONCAT({ctx.col(LPQ, 'title_quest')}, ' - ', {ctx.col(LPQA, 'answer')}) AS {name('title_quest')}"
        if column == "title_quest" else f"{ctx.col(LPQ, column)}"
        for column in columns
    )
    return (
        f"SELECT {plain}, NULL AS {name('id_answer')} FROM {T.LEARNING_POLLQUEST.value}"
        f" WHERE {name('type_quest')} <> '{LOQuestTypes.LIKERT_SCALE.value}'"
        f" UNION SELECT {likert}, {ctx.col(LPQA, 'id_answer')}"
        f" FROM {T.LEARNING_POLLQUEST.value} AS {LPQ}"
        f" JOIN {T.LEARNING_POLLQUEST_ANSWER.value} AS {LPQA}"
        f" ON {ctx.col(LPQA, 'id_quest')} = {ctx.col(LPQ, 'id_quest')}"
        f" AND {ctx.col(LPQ, 'type_quest')} = '{LOQuestTypes.LIKERT_SCALE.value}'"
    )


# ===== FIELDS =====


def group_or_branch_name(ctx: CompileContext) -> None:
    ctx.join(COCT, _join_on(T.CORE_ORG_CHART_TREE, A.CORE_ORG_CHART_TREE,
                            f"{ctx.col(CG, 'idst')} = {ctx.col(COCT, 'idst_oc')}"))
    ctx.join(COC, _join_on(
        T.CORE_ORG_CHART, A.CORE_ORG_CHART,
        f"{ctx.col(COCT, 'idOrg')} = {ctx.col(COC, 'id_dir')}"
        f" AND {ctx.col(COC, 'lang_code')} = {ctx.dialect.literal(ctx.session.lang)}",
    ))
    code = ctx.v(COCT, "code")
    expr = (
        f"CASE WHEN {ctx.v(COCT, 'idOrg')} IS NOT NULL"
        f" THEN CONCAT(CASE WHEN {code} <> '' THEN CONCAT('(', {code}, ') ') ELSE '' END, {ctx.v(COC, 'translation')})"
        f" ELSE SUBSTR({ctx.v(CG, 'groupid')}, 2) END"
    )
    ctx.select(FieldId.GROUP_GROUP_OR_BRANCH_NAME.value, expr)
    ctx.live.add_group_by(ctx.col(CG, "idst"))


def _column(field: FieldId, alias: str, column: str, group: bool = False):
    def builder(ctx: CompileContext) -> None:
        ctx.select(field.value, ctx.v(alias, column))
        if group:
            ctx.live.add_group_by(ctx.col(alias, column))
    return builder


def survey_tracking_type(ctx: CompileContext) -> None:
    lro = A.LEARNING_REPOSITORY_OBJECT.value
    ctx.join(lro, _join_on(T.LEARNING_REPOSITORY_OBJECT, A.LEARNING_REPOSITORY_OBJECT,
                           f"{ctx.col(lro, 'id_object')} = {ctx.col(LO, 'id_object')}"))
    expr = (
        f"CASE WHEN {ctx.v(lro, 'shared_tracking')} > 0 THEN {ctx.t(FieldTranslation.SHARED_TRACKING)}"
        f" ELSE {ctx.t(FieldTranslation.LOCAL_TRACKING)} END"
    )
    ctx.select(FieldId.SURVEY_TRACKING_TYPE.value, expr)


def survey_completion_date(ctx: CompileContext) -> None:
    ctx.select(FieldId.SURVEY_COMPLETION_DATE.value, ctx.datetime(ctx.v(LCO, "last_complete")))
    ctx.live.add_group_by(ctx.col(LPT, "id_track"))


def question_type(ctx: CompileContext) -> None:
    type_quest = ctx.v(LPQ, "type_quest")
    labels = (
        (LOQuestTypes.CHOICE, FieldTranslation.CHOICE),
        (LOQuestTypes.CHOICE_MULTIPLE, FieldTranslation.CHOICE_MULTIPLE),
        (LOQuestTypes.INLINE_CHOICE, FieldTranslation.INLINE_CHOICE),
        (LOQuestTypes.EXTENDED_TEXT, FieldTranslation.EXTENDED_TEXT),
        (LOQuestTypes.LIKERT_SCALE, FieldTranslation.LIKERT_SCALE),
    )
    branches = "".join(f" WHEN {type_quest} = '{quest.value}' THEN {ctx.t(label)}" for quest, label in labels)
    ctx.select(FieldId.QUESTION_TYPE.value, f"CASE{branches} ELSE {type_quest} END")


def question_mandatory(ctx: CompileContext) -> None:
    ctx.select(FieldId.QUESTION_MANDATORY.value, ctx.yes_no(f"CAST({ctx.v(LPQ, 'mandatory')} AS INTEGER) > 0"))


def answer_user(ctx: CompileContext) -> None:
    lpls = A.LEARNING_POLL_LIKERT_SCALE.value
    choices = ", ".join(f"'{value}'" for value in CHOICE_TYPES)
    ctx.join(LPQA, _join_on(
        T.LEARNING_POLLQUEST_ANSWER, A.LEARNING_POLLQUEST_ANSWER,
        f"{ctx.col(LPQA, 'id_answer')} = {ctx.col(LPTA, 'id_answer')}"
        f" AND {ctx.col(LPQ, 'type_quest')} IN ({choices})",
    ))
    ctx.join(lpls, _join_on(
        T.LEARNING_POLL_LIKERT_SCALE, A.LEARNING_POLL_LIKERT_SCALE,
        f"{ctx.col(lpls, 'id_poll')} = {ctx.col(LPT, 'id_poll')}"
        f" AND {ctx.col(LPQ, 'type_quest')} = '{LOQuestTypes.LIKERT_SCALE.value}'"
        f" AND {ctx.col(LPTA, 'id_answer')} = {ctx.col(LPQ, 'id_answer')}"
        f" AND {ctx.col(lpls, 'id')} = TRY_CAST({ctx.col(LPTA, 'more_info')} AS INTEGER)",
    ))
    type_quest = ctx.v(LPQ, "type_quest")
    answer = ctx.col(LPQA, "answer")
    expr = (
        f"CASE WHEN {type_quest} = '{LOQuestTypes.CHOICE.value}' THEN MAX({answer})"
        f" WHEN {type_quest} = '{LOQuestTypes.CHOICE_MULTIPLE.value}' THEN {ctx.dialect.distinct_array_join(answer)}"
        f" WHEN {type_quest} = '{LOQuestTypes.INLINE_CHOICE.value}' THEN MAX({answer})"
        f" WHEN {type_quest} = '{LOQuestTypes.EXTENDED_TEXT.value}' THEN MAX({ctx.col(LPTA, 'more_info')})"
        f" WHEN {type_quest} = '{LOQuestTypes.LIKERT_SCALE.value}' THEN MAX({ctx.col(lpls, 'title')})"
        " ELSE NULL END"
    )
    ctx.select(FieldId.ANSWER_USER.value, expr)


SURVEY_BUILDERS: Dict[str, FieldBuilder] = {
    FieldId.GROUP_GROUP_OR_BRANCH_NAME.value: group_or_branch_name,
    FieldId.SURVEY_ID.value: _column(FieldId.SURVEY_ID, LP, "id_poll"),
    FieldId.SURVEY_TITLE.value: _column(FieldId.SURVEY_TITLE, LP, "title"),
    FieldId.SURVEY_DESCRIPTION.value: _column(FieldId.SURVEY_DESCRIPTION, LP, "description"),
    FieldId.SURVEY_TRACKING_TYPE.value: survey_tracking_type,
    FieldId.SURVEY_COMPLETION_ID.value: _column(FieldId.SURVEY_COMPLETION_ID, LPT, "id_track", group=True),
    FieldId.SURVEY_COMPLETION_DATE.value: survey_completion_date,
    FieldId.QUESTION_ID.value: _column(FieldId.QUESTION_ID, LPQ, "id_quest"),
    FieldId.QUESTION.value: _column(FieldId.QUESTION, LPQ, "title_quest"),
    FieldId.QUESTION_TYPE.value: question_type,
    FieldId.QUESTION_MANDATORY.value: question_mandatory,
    FieldId.ANSWER_USER.value: answer_user,
}


class SurveysCompiler(ReportCompiler):
    """Survey answers of the users in the selected groups, grouped per user, course and question."""

    report_type = ReportType.SURVEYS_INDIVIDUAL_ANSWERS
    filter_kinds = ("users", "courses", "surveys")

    def field_builders(self) -> Dict[str, FieldBuilder]:
        users = {field.value: USER_BUILDERS[field.value] for field in USER_FIELDS}
        courses = {field.value: COURSE_BUILDERS[field.value] for field in COURSE_FIELDS}
        return {**users, **courses, **SURVEY_BUILDERS}

    def build_extra_field(self, ctx: CompileContext, field: ResolvedExtraField) -> None:
        if field.ref.entity == ExtraFieldEntity.COURSE:
            course_extra_field(ctx, field, ctx.col(LCU, "idCourse"))
        else:
            ctx.select(field.key, "''")

    def build_base(self, ctx: CompileContext) -> None:
        name = ctx.dialect.column_name
        definition = ctx.definition
        users = definition.users
        groups = groups_filter(definition)
        ctx.wrap_values = True

        group_table = (
            f"SELECT * FROM {T.CORE_GROUP.value} WHERE TRUE{groups.clause(name('idst'))}"
            f" AND ({name('hidden')} = 'false' OR {name('groupid')} LIKE '/oc|_%' ESCAPE '|')"
        )
        members = f"SELECT * FROM {T.CORE_GROUP_MEMBERS.value} WHERE TRUE{groups.clause(name('idst'))}"
        valid_users = f"SELECT * FROM {T.CORE_USER.value} WHERE {name('valid')} = {ctx.dialect.true_flag()}"

        enrollments = f"SELECT * FROM {T.LEARNING_COURSEUSER_AGGREGATE.value} WHERE TRUE"
        enrollments += ctx.filter("users").clause(name("idUser"))
        enrollments += ctx.user_fields_clause(name("idUser"))
        enrollments += ctx.filter("courses").clause(name("idCourse"))
        if users is not None and users.show_only_learners:
            enrollments += f" AND {name('level')} = {CourseuserLevels.STUDENT.value}"
        enrollments += compose_date_options(ctx.dialect, definition.conditions, [
            (name("date_inscr"), definition.enrollment_date),
            (name("date_complete"), definition.completion_date),
        ])

        polls = f"SELECT * FROM {T.LEARNING_POLL.value} WHERE TRUE{ctx.filter('surveys').clause(name('id_poll'))}"
        tracks = f"SELECT * FROM {T.LEARNING_POLLTRACK.value} WHERE {name('status')} = 'valid'"
        completion = build_date_filter(ctx.dialect, ctx.col(LCO, "last_complete"), definition.survey_completion_date)

        ctx.live.add_cte(T.LEARNING_POLLQUEST_WITH.value, pollquest_cte(ctx))
        ctx.live.add_from(f"({group_table}) AS {CG}")
        ctx.live.add_from(f"JOIN ({members}) AS {CGM} ON {ctx.col(CGM, 'idst')} = {ctx.col(CG, 'idst')}")
        ctx.live.add_from(f"JOIN ({valid_users}) AS {CU} ON {ctx.col(CU, 'idst')} = {ctx.col(CGM, 'idstMember')}")
        ctx.live.add_from(f"JOIN ({enrollments}) AS {LCU} ON {ctx.col(LCU, 'idUser')} = {ctx.col(CGM, 'idstMember')}")
        ctx.live.add_from(f"JOIN ({course_subquery(ctx)}) AS {LC} ON {ctx.col(LC, 'idCourse')} = {ctx.col(LCU, 'idCourse')}")
        ctx.live.add_from(
            f"JOIN {T.LEARNING_ORGANIZATION.value} AS {LO} ON {ctx.col(LCU, 'idCourse')} = {ctx.col(LO, 'idCourse')}"
            f" AND {ctx.col(LO, 'objectType')} = '{LOTypes.POLL.value}'"
        )
        ctx.live.add_from(
            f"JOIN {T.LEARNING_COMMONTRACK.value} AS {LCO} ON {ctx.col(LCO, 'idReference')} = {ctx.col(LO, 'idOrg')}"
            f" AND {ctx.col(LCO, 'idUser')} = {ctx.col(CU, 'idst')}"
        )
        ctx.live.add_from(
            f"JOIN ({tracks}) AS {LPT} ON {ctx.col(LPT, 'id_track')} = {ctx.col(LCO, 'idTrack')}"
            f" AND {ctx.col(LCO, 'objectType')} = '{LOTypes.POLL.value}'"
            f" AND {ctx.col(LPT, 'id_user')} = {ctx.col(CU, 'idst')}"
            + (f" AND {completion}" if completion else "")
        )
        ctx.live.add_from(f"JOIN ({polls}) AS {LP} ON {ctx.col(LP, 'id_poll')} = {ctx.col(LPT, 'id_poll')}")
        ctx.live.add_from(
            f"LEFT JOIN {T.LEARNING_POLLTRACK_ANSWER.value} AS {LPTA} ON {ctx.col(LPTA, 'id_track')} = {ctx.col(LPT, 'id_track')}"
        )
        ctx.live.add_from(
            f"JOIN {T.LEARNING_POLLQUEST_WITH.value} AS {LPQ} ON {ctx.col(LPQ, 'id_quest')} = {ctx.col(LPTA, 'id_quest')}"
            f" AND {ctx.col(LPQ, 'type_quest')} NOT IN ('{LOQuestTypes.TITLE.value}', '{LOQuestTypes.BREAK_PAGE.value}')"
        )
        ctx.live.add_group_by(
            ctx.col(CU, "idst"), ctx.col(LCU, "idCourse"), ctx.col(LPQ, "id_quest"), ctx.col(LPQ, "title_quest")
        )

    def default_filters(self, session: SessionContext) -> Dict[str, object]:
        return {
            "users": UsersFilter(),
            "courses": CoursesFilter(),
            "surveys": SurveysFilter(),
            "enrollment_date": default_date_option(),
            "completion_date": default_date_option(),
            "survey_completion_date": default_date_option(),
            "course_expiration_date": default_date_option(),
        }

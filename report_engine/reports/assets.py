"""Assets - Statistics: one row per published asset with its engagement counters."""

from typing import Dict

from report_engine.catalog.enums import ReportType
from report_engine.catalog.fields import FieldId
from report_engine.catalog.tables import TableAliases as A
from report_engine.catalog.tables import Tables as T
from report_engine.filters.calculators import IdFilter, channels_filter
from report_engine.legacy.field_maps import LEGACY_ASSET_FIELDS, LEGACY_ASSET_STATISTICS_FIELDS
from report_engine.query.dates import build_date_filter
from report_engine.reports.base import FieldBuilder, ReportCompiler, default_date_option
from report_engine.reports.common_fields import _join_on
from report_engine.reports.context import CompileContext
from report_engine.reports.schemas import AssetsFilter, ReportDefinition
from report_engine.reports.session import SessionContext

C = A.APP7020_CONTENT.value
COP = A.APP7020_CONTENT_PUBLISHED.value
CHA = A.APP7020_CHANNEL_ASSETS.value
CHT = A.APP7020_CHANNEL_TRANSLATION.value
IA = A.APP7020_INVITATIONS_AGGREGATE.value
PUBLISHER = "cu"

CONVERTED = 20
ERP_ADMIN_ROLE = "/framework/level/erpadmin"


def _count_or_zero(ctx: CompileContext, alias: str, column: str) -> str:
    value = ctx.v(alias, column)
    return f"CASE WHEN {value} IS NOT NULL THEN {value} ELSE 0 END"


def _on_content(ctx: CompileContext, alias: str, column: str = "idContent") -> str:
    return f"{ctx.col(C, 'id')} = {ctx.col(alias, column)}"


# ===== ASSET =====


def asset_name(ctx: CompileContext) -> None:
    ctx.select(FieldId.ASSET_NAME.value, ctx.v(C, "title"))


def published_on(ctx: CompileContext) -> None:
    ctx.select(FieldId.PUBLISHED_ON.value, ctx.datetime(ctx.v(COP, "datePublished")))


def channel_names_subquery(ctx: CompileContext) -> str:
    """
    Channel names in the caller's language, falling back to the platform
    default language and then to any translation.
    """
    name = ctx.dialect.column_name
    any_value = ctx.dialect.any_value
    user_lang, default_lang, fallback = "cht_user", "cht_default", "cht_any"
    channel = ctx.col(CHA, "idChannel")
    user_name = any_value(ctx.col(user_lang, "name"))
    default_name = any_value(ctx.col(default_lang, "name"))
    return (
        f"SELECT {channel} AS {name('idChannel')},"
        f" CASE WHEN {user_name} IS NOT NULL AND {user_name} <> '' THEN {user_name}"
        f" WHEN {default_name} IS NOT NULL AND {default_name} <> '' THEN {default_name}"
        f" ELSE {any_value(ctx.col(fallback, 'name'))} END AS {name('name')}"
        f" FROM {T.APP7020_CHANNEL_ASSETS.value} AS {CHA}"
        f" LEFT JOIN {T.APP7020_CHANNEL_TRANSLATION.value} AS {user_lang}"
        f" ON {ctx.col(user_lang, 'idChannel')} = {channel}"
        f" AND {ctx.col(user_lang, 'lang')} = {ctx.dialect.literal(ctx.lang_code)}"
        f" LEFT JOIN {T.APP7020_CHANNEL_TRANSLATION.value} AS {default_lang}"
        f" ON {ctx.col(default_lang, 'idChannel')} = {channel}"
        f" AND {ctx.col(default_lang, 'lang')} = {ctx.dialect.literal(ctx.platform.default_language_code)}"
        f" LEFT JOIN {T.APP7020_CHANNEL_TRANSLATION.value} AS {fallback}"
        f" ON {ctx.col(fallback, 'idChannel')} = {channel}"
        f" GROUP BY {channel}"
    )


def channels(ctx: CompileContext) -> None:
    ctx.join(CHT, f"LEFT JOIN ({channel_names_subquery(ctx)}) AS {CHT}"
                  f" ON {ctx.col(CHT, 'idChannel')} = {ctx.col(CHA, 'idChannel')}")
    ctx.select(FieldId.CHANNELS.value, ctx.dialect.distinct_array_join(ctx.col(CHT, "name")))


def published_by(ctx: CompileContext) -> None:
    ctx.join(PUBLISHER, _join_on(T.CORE_USER, A.CORE_USER, f"{ctx.col(PUBLISHER, 'idst')} = {ctx.col(C, 'userId')}"))
    first, last = ctx.col(PUBLISHER, "firstname"), ctx.col(PUBLISHER, "lastname")
    if ctx.platform.show_first_name_first:
        fullname = f"CONCAT({first}, ' ', {last})"
    else:
        fullname = f"CONCAT({last}, ' ', {first})"
    ctx.select(FieldId.PUBLISHED_BY.value, ctx.value(fullname))


# ===== STATISTICS =====


def _aggregate_counter(field: FieldId, table: T, alias: A, column: str, key: str = "idContent"):
    def builder(ctx: CompileContext) -> None:
        ctx.join(alias.value, _join_on(table, alias, _on_content(ctx, alias.value, key)))
        ctx.select(field.value, _count_or_zero(ctx, alias.value, column))
    return builder


def _join_invitations(ctx: CompileContext) -> None:
    ctx.join(IA, _join_on(T.APP7020_INVITATIONS_AGGREGATE, A.APP7020_INVITATIONS_AGGREGATE, _on_content(ctx, IA, "id")))


def asset_rating(ctx: CompileContext) -> None:
    cr = A.APP7020_CONTENT_RATING.value
    ctx.join(cr, _join_on(T.APP7020_CONTENT_RATING, A.APP7020_CONTENT_RATING, _on_content(ctx, cr)))
    count = f"COUNT({ctx.col(cr, 'id')})"
    expr = (
        f"CASE WHEN {count} > 0"
        f" THEN ROUND(CAST(SUM({ctx.col(cr, 'rating')}) AS DOUBLE) / CAST({count} AS DOUBLE), 2)"
        " ELSE 0 END"
    )
    ctx.select(FieldId.ASSET_RATING.value, expr)


def _distinct_count(field: FieldId, table: T, alias: A, key: str):
    def builder(ctx: CompileContext) -> None:
        ctx.join(alias.value, _join_on(table, alias, _on_content(ctx, alias.value, key)))
        ctx.select(field.value, f"COUNT(DISTINCT {ctx.col(alias, 'id')})")
    return builder


def invited_people(ctx: CompileContext) -> None:
    _join_invitations(ctx)
    ctx.select(FieldId.INVITED_PEOPLE.value, _count_or_zero(ctx, IA, "count_invite_watch"))


def _watched_condition(ctx: CompileContext) -> str:
    ch = A.APP7020_CONTENT_HISTORY.value
    ctx.join(ch, _join_on(T.APP7020_CONTENT_HISTORY, A.APP7020_CONTENT_HISTORY, _on_content(ctx, ch)))
    return f"COUNT(DISTINCT {ctx.col(ch, 'id')}) > 0"


def watched(ctx: CompileContext) -> None:
    ctx.select(FieldId.WATCHED.value, ctx.yes_no(_watched_condition(ctx)))


def not_watched(ctx: CompileContext) -> None:
    ctx.select(FieldId.NOT_WATCHED.value, ctx.yes_no(f"NOT ({_watched_condition(ctx)})"))


def global_watch_rate(ctx: CompileContext) -> None:
    coha = A.APP7020_CONTENT_HISTORY_AGGREGATE.value
    _join_invitations(ctx)
    ctx.join(coha, _join_on(T.APP7020_CONTENT_HISTORY_AGGREGATE, A.APP7020_CONTENT_HISTORY_AGGREGATE,
                            _on_content(ctx, coha, "id")))
    invited = ctx.v(IA, "count_invite_watch")
    rate = f"ROUND({ctx.v(coha, 'views')} * 100 / {invited})"
    expr = (
        f"CONCAT(CASE WHEN {invited} > 0 THEN {ctx.dialect.cast_varchar(rate)}"
        f" ELSE '0' END, ' %')"
    )
    ctx.select(FieldId.GLOBAL_WATCH_RATE.value, expr)


def average_reaction_time(ctx: CompileContext) -> None:
    iat = A.APP7020_INVITATIONS_AVERAGE_TIME.value
    ctx.join(iat, _join_on(T.APP7020_INVITATIONS_AVERAGE_TIME, A.APP7020_INVITATIONS_AVERAGE_TIME,
                           _on_content(ctx, iat)))
    ctx.select(FieldId.AVERAGE_REACTION_TIME.value, ctx.v(iat, "reactionTime"))


ASSET_BUILDERS: Dict[str, FieldBuilder] = {
    FieldId.ASSET_NAME.value: asset_name,
    FieldId.PUBLISHED_ON.value: published_on,
    FieldId.CHANNELS.value: channels,
    FieldId.PUBLISHED_BY.value: published_by,
    FieldId.ANSWERS.value: _aggregate_counter(
        FieldId.ANSWERS, T.APP7020_ANSWER_AGGREGATE, A.APP7020_ANSWER_AGGREGATE, "count"
    ),
    FieldId.ANSWER_LIKES.value: _aggregate_counter(
        FieldId.ANSWER_LIKES, T.APP7020_ANSWER_LIKE_AGGREGATE, A.APP7020_ANSWER_LIKE_AGGREGATE, "count"
    ),
    FieldId.ANSWER_DISLIKES.value: _aggregate_counter(
        FieldId.ANSWER_DISLIKES, T.APP7020_ANSWER_DISLIKE_AGGREGATE, A.APP7020_ANSWER_DISLIKE_AGGREGATE, "count"
    ),
    FieldId.ASSET_RATING.value: asset_rating,
    FieldId.TOTAL_VIEWS.value: _aggregate_counter(
        FieldId.TOTAL_VIEWS,
        T.APP7020_CONTENT_HISTORY_TOTAL_VIEWS_AGGREGATE,
        A.APP7020_CONTENT_HISTORY_TOTAL_VIEWS_AGGREGATE,
        "totalViews",
        key="id",
    ),
    FieldId.BEST_ANSWERS.value: _distinct_count(
        FieldId.BEST_ANSWERS, T.APP7020_BEST_ANSWER_AGGREGATE, A.APP7020_BEST_ANSWER_AGGREGATE, "id"
    ),
    FieldId.QUESTIONS.value: _distinct_count(
        FieldId.QUESTIONS, T.APP7020_QUESTION, A.APP7020_QUESTION, "idContent"
    ),
    FieldId.INVITED_PEOPLE.value: invited_people,
    FieldId.WATCHED.value: watched,
    FieldId.NOT_WATCHED.value: not_watched,
    FieldId.GLOBAL_WATCH_RATE.value: global_watch_rate,
    FieldId.AVERAGE_REACTION_TIME.value: average_reaction_time,
}


class AssetsCompiler(ReportCompiler):
    """Converted, public assets published by anyone but the ERP admins, grouped per asset."""

    report_type = ReportType.ASSETS_STATISTICS
    filter_kinds = ("assets",)

    def field_builders(self) -> Dict[str, FieldBuilder]:
        return dict(ASSET_BUILDERS)

    async def resolve_filters(
        self, definition: ReportDefinition, session: SessionContext, check_visibility: bool
    ) -> Dict[str, IdFilter]:
        filters = await super().resolve_filters(definition, session, check_visibility)
        assets = definition.assets
        # a channel-only selection restricts through the channels, not the asset list
        if assets is not None and not assets.all and not assets.assets and assets.channels:
            filters["assets"] = IdFilter.unrestricted()
        filters["channels"] = channels_filter(definition)
        return filters

    def build_base(self, ctx: CompileContext) -> None:
        name = ctx.dialect.column_name
        ctx.wrap_values = True

        content = f"SELECT * FROM {T.APP7020_CONTENT.value} WHERE TRUE"
        content += ctx.filter("assets").clause(name("id"))
        published = build_date_filter(ctx.dialect, name("created"), ctx.definition.published_date)
        if published:
            content += f" AND {published}"

        ctx.live.add_from(f"({content}) AS {C}")
        ctx.live.add_from(
            f"JOIN {T.APP7020_CHANNEL_ASSETS.value} AS {CHA} ON {ctx.col(CHA, 'idAsset')} = {ctx.col(C, 'id')}"
            f" AND {ctx.col(CHA, 'asset_type')} = 1"
        )
        ctx.live.add_from(
            f"LEFT JOIN {T.APP7020_CONTENT_PUBLISHED.value} AS {COP} ON {ctx.col(C, 'id')} = {ctx.col(COP, 'idContent')}"
            f" AND {ctx.col(COP, 'actiontype')} = 1"
        )

        ctx.live.add_where(
            f"AND {ctx.col(C, 'conversion_status')} = {CONVERTED} AND {ctx.col(C, 'is_private')} = 0"
        )
        ctx.live.add_where(
            f"AND {ctx.col(COP, 'idUser')} NOT IN (SELECT CAST({name('user_id')} AS INTEGER)"
            f" FROM {T.RBAC_ASSIGNMENT.value} WHERE {name('item_name')} = '{ERP_ADMIN_ROLE}')"
        )
        channel_clause = ctx.filter("channels").clause(ctx.col(CHA, "idChannel"))
        if channel_clause:
            ctx.live.add_where(channel_clause.strip())
        ctx.live.add_group_by(ctx.col(C, "id"))

    def default_filters(self, session: SessionContext) -> Dict[str, object]:
        return {
            "assets": AssetsFilter(),
            "published_date": default_date_option(),
        }

    def legacy_field_maps(self) -> Dict[str, Dict[str, str]]:
        return {
            "asset": LEGACY_ASSET_FIELDS,
            "stat": LEGACY_ASSET_STATISTICS_FIELDS,
        }

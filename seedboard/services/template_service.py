"""Outreach template variables: extraction, substitution and highlighting."""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Mapping, NamedTuple, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.models import OutreachTemplate
from seedboard.repositories.influencer_repository import InfluencerRepository
from seedboard.repositories.project_repository import ProjectRepository
from seedboard.repositories.template_repository import TemplateRepository
from seedboard.services.seeding_exceptions import InfluencerNotFoundError, TemplateNotFoundError

VARIABLE_PATTERN = re.compile(r"\{[^}]+\}")

ALL = "all"


@dataclass(frozen=True)
class TemplateVariable:
    """Known ``{token}`` and the record field that fills it."""
    key: str
    label: str
    field: str


OUTREACH_VARIABLES = (
    TemplateVariable("{인플루언서명}", "인플루언서명", "account_id"),
    TemplateVariable("{인플루언서_이름}", "인플루언서_이름", "account_name"),
    TemplateVariable("{팔로워수}", "팔로워수", "follower_count"),
    TemplateVariable("{제품명}", "제품명", "product_name"),
    TemplateVariable("{브랜드명}", "브랜드명", "brand"),
    TemplateVariable("{원고비}", "원고비", "fee"),
    TemplateVariable("{담당자명}", "담당자명", "assignee_name"),
    TemplateVariable("{가이드링크}", "가이드링크", "guide_link"),
)


class TemplateSegment(NamedTuple):
    """Piece of template text, either plain or a variable token."""
    text: str
    is_variable: bool


def extract_variables(content: str) -> List[str]:
    """Distinct ``{token}`` strings in first-occurrence order."""
    return list(dict.fromkeys(VARIABLE_PATTERN.findall(content or "")))


def replace_variables(content: str, values: Mapping[str, Any]) -> str:
    """Substitute catalogue tokens whose field has a value.

    Tokens outside the catalogue, and catalogue tokens without a value, are
    left in the text untouched.
    """
    result = content
    for variable in OUTREACH_VARIABLES:
        value = values.get(variable.field)
        if value is None:
            continue
        replacement = str(value)
        result = re.sub(re.escape(variable.key), lambda _match: replacement, result)
    return result


class HighlightedTemplate:
    """Iterable view over template segments; each iteration rescans the text."""

    def __init__(self, content: str):
        self.content = content or ""

    def __iter__(self) -> Iterator[TemplateSegment]:
        last_index = 0
        for match in VARIABLE_PATTERN.finditer(self.content):
            if match.start() > last_index:
                yield TemplateSegment(self.content[last_index:match.start()], False)
            yield TemplateSegment(match.group(0), True)
            last_index = match.end()
        if last_index < len(self.content):
            yield TemplateSegment(self.content[last_index:], False)


def highlight_variables(content: str) -> HighlightedTemplate:
    return HighlightedTemplate(content)


def _display_number(value: Any) -> Any:
    if isinstance(value, (Decimal, float)) and value == int(value):
        return int(value)
    return value


def build_template_values(
    influencer: Any,
    project: Optional[Any] = None,
    *,
    assignee_name: Optional[str] = None,
    guide_link: Optional[str] = None,
) -> Dict[str, Any]:
    """Map catalogue fields to values taken from an influencer and its project."""
    values: Dict[str, Any] = {
        "account_id": f"@{influencer.account_id}" if influencer.account_id else None,
        "account_name": influencer.account_name or None,
        "follower_count": influencer.follower_count,
        "product_name": influencer.product_name or getattr(project, "product_name", None) or None,
        "brand": getattr(project, "brand", None),
        "fee": _display_number(influencer.fee) if influencer.fee else None,
        "assignee_name": assignee_name,
        "guide_link": guide_link or influencer.guide_link or None,
    }
    if values["brand"] is not None:
        values["brand"] = getattr(values["brand"], "value", values["brand"])
    return values


def template_matches(
    template: Any,
    *,
    seeding_type: Optional[str] = None,
    content_type: Optional[str] = None,
    brand: Optional[str] = None,
) -> bool:
    """Whether a template is scoped to the given context; ``'all'`` matches anything."""
    for scope, wanted in (
        (template.seeding_type, seeding_type),
        (template.content_type, content_type),
        (template.brand, brand),
    ):
        if wanted is None or scope in (None, ALL):
            continue
        if getattr(scope, "value", scope) != getattr(wanted, "value", wanted):
            return False
    return True


class OutreachTemplateService:
    """Template persistence plus rendering for a concrete influencer."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = TemplateRepository(session)
        self.influencers = InfluencerRepository(session)
        self.projects = ProjectRepository(session)
        self.logger = structlog.get_logger(__name__)

    async def create_template(
        self,
        name: str,
        content: str,
        *,
        seeding_type: str = ALL,
        content_type: str = ALL,
        brand: str = ALL,
    ) -> OutreachTemplate:
        """Create a template; the variable list is derived from the content."""
        return await self.repository.create(
            name=name,
            content=content,
            seeding_type=seeding_type,
            content_type=content_type,
            brand=brand,
            variables=extract_variables(content),
        )

    async def update_template(self, template_id: str, **updates: Any) -> OutreachTemplate:
        template = await self.repository.get_by_id(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        if "content" in updates:
            updates["variables"] = extract_variables(updates["content"])
        return await self.repository.update(template, updates)

    async def list_for_context(
        self,
        *,
        seeding_type: Optional[str] = None,
        content_type: Optional[str] = None,
        brand: Optional[str] = None,
    ) -> List[OutreachTemplate]:
        templates = await self.repository.list_all()
        return [
            template
            for template in templates
            if template_matches(
                template, seeding_type=seeding_type, content_type=content_type, brand=brand
            )
        ]

    async def render_for_influencer(
        self,
        template_id: str,
        influencer_id: str,
        *,
        assignee_name: Optional[str] = None,
        guide_link: Optional[str] = None,
    ) -> str:
        """Render a template for an influencer and count the usage."""
        template = await self.repository.get_by_id(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)

        influencer = await self.influencers.get_by_id(influencer_id)
        if influencer is None:
            raise InfluencerNotFoundError(influencer_id)

        project = None
        if influencer.project_id:
            project = await self.projects.get_by_id(influencer.project_id)

        values = build_template_values(
            influencer, project, assignee_name=assignee_name, guide_link=guide_link
        )
        rendered = replace_variables(template.content, values)

        await self.increment_usage(template)
        return rendered

    async def increment_usage(self, template: OutreachTemplate) -> None:
        """Bump the usage counter in a savepoint; failures are logged, never raised."""
        try:
            async with self.session.begin_nested():
                await self.repository.increment_usage(template)
        except Exception as exc:
            self.logger.error(
                "Failed to increment template usage",
                template_id=template.id,
                error=str(exc),
            )

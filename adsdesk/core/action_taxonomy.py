"""AdsDesk — Action Taxonomy Resolver.

Maps the Graph API ``actions`` list onto the two numbers the dashboard shows
per entity: the headline "Results" count and the messaging-contact count.

The priority order mirrors how Ads Manager attributes a single Results
number per campaign. Ads Manager shows exactly one purchase type, so the
first matching purchase tag wins and values are never summed.
"""

from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Tuple

from adsdesk.core.coercion import coerce_int

# Matched exactly or as a substring.
MESSAGING_ACTION_TYPES: Tuple[str, ...] = (
    "onsite_conversion.messaging_contact",
    "messaging_contact",
    "messaging_conversation_started",
)

# Matched exactly, first hit wins.
PURCHASE_ACTION_TYPES: Tuple[str, ...] = (
    "onsite_conversion.purchase",  # Purchases on Meta
    "onsite_web_purchase",
    "onsite_app_purchase",
    "offsite_conversion.fb_pixel_purchase",
    "omni_purchase",  # Combined, only if nothing specific was reported
)

# Older spellings still seen on some API versions; scanned after omni_purchase.
LEGACY_PURCHASE_ACTION_TYPES: Tuple[str, ...] = (
    "onsite_conversion.meta_purchase",
    "purchase",
)

LEAD_OBJECTIVES = frozenset({"OUTCOME_LEADS", "LEAD_GENERATION"})
TRAFFIC_OBJECTIVES = frozenset({"OUTCOME_TRAFFIC", "LINK_CLICKS"})

LEAD_ACTION_FRAGMENT = "lead"
LINK_CLICK_ACTION_TYPE = "link_click"


def _field(action: Any, key: str) -> Any:
    if isinstance(action, Mapping):
        return action.get(key)
    return getattr(action, key, None)


def _action_type(action: Any) -> str:
    raw = _field(action, "action_type")
    return str(raw).lower() if raw else ""


def _find_value(
    actions: Sequence[Any], matches: Callable[[str], bool]
) -> Optional[int]:
    """Value of the first action whose tag satisfies ``matches``.

    An action with a null value is skipped.
    """
    for action in actions:
        tag = _action_type(action)
        if not tag or not matches(tag):
            continue
        value = _field(action, "value")
        if value is None:
            continue
        return coerce_int(value)
    return None


def resolve_messages(actions: Optional[Iterable[Any]]) -> int:
    """Messaging contacts: first candidate tag present, in priority order."""
    actions = list(actions or [])
    for candidate in MESSAGING_ACTION_TYPES:
        value = _find_value(actions, lambda tag: tag == candidate or candidate in tag)
        if value is not None:
            return value
    return 0


def resolve_results(
    actions: Optional[Iterable[Any]],
    objective: Optional[str] = None,
    conversions: Any = None,
) -> int:
    """Headline results count for an entity with the given objective."""
    actions = list(actions or [])
    results = 0

    for candidate in PURCHASE_ACTION_TYPES + LEGACY_PURCHASE_ACTION_TYPES:
        value = _find_value(actions, lambda tag: tag == candidate)
        if value is not None:
            results = value
            break

    if results == 0 and actions:
        obj = (objective or "").upper()
        if obj in LEAD_OBJECTIVES:
            results = _find_value(actions, lambda tag: LEAD_ACTION_FRAGMENT in tag) or 0
        elif obj in TRAFFIC_OBJECTIVES:
            results = (
                _find_value(actions, lambda tag: tag == LINK_CLICK_ACTION_TYPE) or 0
            )
        # Engagement and other objectives: no purchases means 0 results.

    if results == 0:
        converted = coerce_int(conversions)
        if converted > 0:
            results = converted

    return results


def resolve_actions(
    actions: Optional[Iterable[Any]],
    objective: Optional[str] = None,
    conversions: Any = None,
) -> Tuple[int, int]:
    """Return ``(results, messages)`` for an actions list."""
    actions = list(actions or [])
    return resolve_results(actions, objective, conversions), resolve_messages(actions)

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from topgamescore.core.config import get_settings

logger = structlog.get_logger(__name__)

ALERT_CHANNEL_GENERIC = "generic"
ALERT_CHANNEL_SLACK = "slack"
SEVERITY_COLOR = {
    "critical": "#B42318",
    "error": "#F04438",
    "warning": "#F79009",
    "info": "#1570EF",
}


@dataclass(frozen=True)
class AlertRoute:
    channels: tuple[str, ...]
    severity: str


@dataclass(frozen=True)
class AlertTarget:
    channel: str
    url: str


DEFAULT_ALERT_ROUTE = AlertRoute(channels=(ALERT_CHANNEL_GENERIC,), severity="warning")
EVENT_ALERT_ROUTES = {
    "score_totals_over_counted": AlertRoute(
        channels=(ALERT_CHANNEL_SLACK, ALERT_CHANNEL_GENERIC),
        severity="error",
    ),
    "score_reconciliation_repaired": AlertRoute(
        channels=(ALERT_CHANNEL_GENERIC,),
        severity="warning",
    ),
}


def resolve_alert_targets(*, event: str, generic_url: str, slack_url: str) -> tuple[AlertRoute, list[AlertTarget]]:
    route = EVENT_ALERT_ROUTES.get(event, DEFAULT_ALERT_ROUTE)
    channel_to_url = {
        ALERT_CHANNEL_GENERIC: generic_url.strip(),
        ALERT_CHANNEL_SLACK: slack_url.strip(),
    }
    targets = [
        AlertTarget(channel=channel, url=channel_to_url[channel])
        for channel in route.channels
        if channel_to_url.get(channel)
    ]
    if not targets and channel_to_url[ALERT_CHANNEL_GENERIC]:
        targets.append(AlertTarget(channel=ALERT_CHANNEL_GENERIC, url=channel_to_url[ALERT_CHANNEL_GENERIC]))
    return route, targets


def build_alert_body(
    *,
    channel: str,
    event: str,
    payload: dict[str, object],
    sent_at: datetime,
    severity: str,
    app_env: str,
) -> dict[str, Any]:
    if channel == ALERT_CHANNEL_SLACK:
        return {
            "text": f"[{severity.upper()}] {event}",
            "attachments": [
                {
                    "color": SEVERITY_COLOR.get(severity, SEVERITY_COLOR["warning"]),
                    "fields": [
                        {"title": "Environment", "value": app_env, "short": True},
                        {"title": "Sent At", "value": sent_at.isoformat(), "short": True},
                        {
                            "title": "Payload",
                            "value": json.dumps(payload, sort_keys=True, default=str),
                            "short": False,
                        },
                    ],
                }
            ],
        }
    return {
        "event": event,
        "payload": payload,
        "sent_at": sent_at.isoformat(),
        "severity": severity,
        "app_env": app_env,
    }


async def send_ops_alert(*, event: str, payload: dict[str, object]) -> bool:
    settings = get_settings()
    route, targets = resolve_alert_targets(
        event=event,
        generic_url=settings.ops_alert_webhook_url,
        slack_url=settings.ops_alert_slack_webhook_url,
    )
    if not targets:
        return False

    sent_at = datetime.now(timezone.utc)
    delivered_to: list[str] = []
    async with httpx.AsyncClient(timeout=5.0) as client:
        for target in targets:
            body = build_alert_body(
                channel=target.channel,
                event=event,
                payload=payload,
                sent_at=sent_at,
                severity=route.severity,
                app_env=settings.app_env,
            )
            try:
                response = await client.post(target.url, json=body)
                response.raise_for_status()
            except httpx.HTTPError:
                logger.exception("ops_alert_delivery_failed", alert_event=event, provider=target.channel)
                continue
            delivered_to.append(target.channel)

    if not delivered_to:
        logger.error("ops_alert_delivery_exhausted", alert_event=event, severity=route.severity)
        return False
    logger.info("ops_alert_delivered", alert_event=event, delivered_to=delivered_to)
    return True

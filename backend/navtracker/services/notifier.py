"""Notification formatting and delivery."""

import asyncio
import logging
import smtplib
from decimal import Decimal
from email.message import EmailMessage

from navcore.summary import FundSnapshot, NotificationSummary, TrendDescriptor

logger = logging.getLogger(__name__)

_TREND_ARROW = {
    TrendDescriptor.STRONG_BULL: "↑↑",
    TrendDescriptor.WEAK_BULL: "↑",
    TrendDescriptor.NEUTRAL: "→",
    TrendDescriptor.WEAK_BEAR: "↓",
    TrendDescriptor.STRONG_BEAR: "↓↓",
}


def _money(value: Decimal | None) -> str:
    return f"₹{value}" if value is not None else "N/A"


def format_snapshot(fund: FundSnapshot, periods: list[int]) -> str:
    change = ""
    if fund.change_pct is not None:
        arrow = "↑" if fund.change_pct > 0 else "↓"
        change = f" ({fund.change_pct}% {arrow} 1d)"

    lines = [f"* {fund.instrument}", f"   Current NAV: {_money(fund.latest_value)}{change}"]
    for period in periods:
        lines.append(f"   {period}-Day MA: {_money(fund.moving_averages.get(period))}")

    trend = f"   Trend: {_TREND_ARROW[fund.trend]} {fund.trend.value}"
    if fund.trend_spread_pct is not None and len(periods) >= 2:
        side = "above" if fund.trend_spread_pct > 0 else "below"
        trend += (
            f" ({periods[0]}MA {fund.trend_spread_pct}% {side} {periods[1]}MA)"
        )
    lines.append(trend)
    return "\n".join(lines)


def format_subject(summary: NotificationSummary) -> str:
    marker = ""
    if summary.critical:
        marker = " [CRITICAL]"
    elif summary.warning:
        marker = " [WARNING]"
    return f"Mutual Fund Analysis – {summary.date.isoformat()}{marker}"


def format_body(summary: NotificationSummary) -> str:
    """Plain-text body: snapshot per fund, then alerts by severity."""
    periods = sorted({p for fund in summary.funds for p in fund.moving_averages})
    critical, warning, other = summary.critical, summary.warning, summary.other

    if critical or warning:
        headline = f"Alerts: {len(critical)} Critical, {len(warning)} Warning"
    else:
        headline = "No significant alerts"

    sections = [
        f"Market Snapshot for {summary.date.isoformat()}",
        headline,
        "\n\n".join(format_snapshot(fund, periods) for fund in summary.funds),
    ]
    for title, funds in (
        ("CRITICAL ALERTS", critical),
        ("WARNING ALERTS", warning),
        ("OTHER ALERTS", other),
    ):
        if funds:
            entries = "\n\n".join(f"{f.instrument}:\n{f.signal.alert_text}" for f in funds)
            sections.append(f"{title}\n{entries}")

    sections.append("Remember to combine this with your own research and financial goals.")
    return "\n\n".join(sections)


class LogNotifier:
    """Writes the summary to the log. Used when email is not configured."""

    async def notify(self, summary: NotificationSummary) -> None:
        logger.info(f"{format_subject(summary)}\n{format_body(summary)}")


class EmailNotifier:
    """Sends the summary over SMTP (STARTTLS)."""

    def __init__(
        self,
        host: str,
        port: int,
        mail_from: str,
        mail_to: str,
        username: str = "",
        password: str = "",
        timeout: float = 12.0,
    ):
        self.host = host
        self.port = port
        self.mail_from = mail_from
        self.mail_to = mail_to
        self.username = username
        self.password = password
        self.timeout = timeout

    def build_message(self, summary: NotificationSummary) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = format_subject(summary)
        msg["From"] = self.mail_from
        msg["To"] = self.mail_to
        msg.set_content(format_body(summary))
        return msg

    def _send(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)

    async def notify(self, summary: NotificationSummary) -> None:
        msg = self.build_message(summary)
        await asyncio.to_thread(self._send, msg)
        logger.info(f"Email alert sent to {self.mail_to}")

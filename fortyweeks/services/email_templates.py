"""Email templates for village notifications.

Templates use {{variable}} placeholders. HTML templates get escaped values;
blocks that are optional (week badge, photo count, requester message) are
pre-rendered in build_* functions and inserted raw.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

from fortyweeks.db.enums import EmailType


VARIABLE_PATTERN = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")

# Placeholders whose values are trusted pre-rendered HTML.
RAW_HTML_VARIABLES = frozenset(
    {"body", "cover_html", "message_html", "photos_html", "unsubscribe_html", "week_badge_html"}
)


@dataclass
class RenderedEmail:
    subject: str
    html_body: str
    text_body: str


def render_template(template: str, variables: dict[str, object], *, escape: bool) -> str:
    """
    Substitute {{name}} placeholders.

    Missing variables render as empty strings. With escape=True, values are
    HTML-escaped unless listed in RAW_HTML_VARIABLES.
    """

    def replace_var(match: re.Match) -> str:
        name = match.group(1)
        value = variables.get(name)
        if value is None:
            return ""
        text = str(value)
        if escape and name not in RAW_HTML_VARIABLES:
            return html.escape(text)
        return text

    return VARIABLE_PATTERN.sub(replace_var, template)


def generate_subject(email_type: EmailType, variables: dict[str, object]) -> str:
    parent_names = variables.get("parent_names", "")
    if email_type == EmailType.UPDATE:
        week = variables.get("update_week")
        if week:
            return f"Week {week} Update from {parent_names}"
        return f"New update from {parent_names}"
    if email_type == EmailType.MILESTONE:
        return (
            f"🎉 Milestone reached: Week {variables.get('milestone_week', '')} - "
            f"{variables.get('milestone_title', '')}"
        )
    if email_type == EmailType.WELCOME:
        return f"Welcome to {parent_names}'s pregnancy!"
    if email_type == EmailType.ANNOUNCEMENT:
        return f"Important announcement from {parent_names}"
    if email_type == EmailType.REMINDER:
        return f"Weekly reminder from {parent_names}"
    if email_type == EmailType.ACCESS_REQUEST:
        return "New access request for your pregnancy timeline"
    if email_type == EmailType.TEST:
        return f"Test Email from {variables.get('sender_name', '')}"
    return f"Update from {parent_names}"


# =============================================================================
# Layout
# =============================================================================

_LAYOUT = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{title}}</title>
    <style>
        body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 0; background-color: #f8f9fa; }
        .container { max-width: 600px; margin: 0 auto; background-color: #ffffff; }
        .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; text-align: center; }
        .content { padding: 40px 30px; }
        .card { border: 1px solid #e9ecef; border-radius: 8px; padding: 25px; margin: 20px 0; background-color: #f8f9fa; }
        .week-badge { background-color: #667eea; color: white; padding: 8px 16px; border-radius: 20px; font-size: 14px; display: inline-block; margin-bottom: 15px; }
        .cta-button { display: inline-block; background-color: #667eea; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-weight: 600; margin: 20px 0; }
        .footer { padding: 30px; text-align: center; color: #666; font-size: 14px; border-top: 1px solid #e9ecef; }
        .footer a { color: #667eea; text-decoration: none; }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>{{sender_name}}</h1>
            <p>{{header_line}}</p>
        </div>
        <div class="content">
{{body}}
        </div>
        <div class="footer">
            <p>{{footer_line}}</p>
            <p><a href="{{timeline_url}}">View Timeline</a>{{unsubscribe_html}}</p>
            <p>&copy; {{sender_name}}. All rights reserved.</p>
        </div>
    </div>
</body>
</html>"""


def _wrap(body_template: str, variables: dict[str, object], header_line: str, footer_line: str) -> str:
    """Render a body fragment, then drop it into the shared layout."""
    body = render_template(body_template, variables, escape=True)
    unsubscribe_url = variables.get("unsubscribe_url")
    unsubscribe_html = (
        f' | <a href="{html.escape(str(unsubscribe_url))}">Unsubscribe</a>' if unsubscribe_url else ""
    )
    layout_vars = {
        "title": header_line,
        "sender_name": variables.get("sender_name"),
        "header_line": header_line,
        "footer_line": footer_line,
        "timeline_url": variables.get("timeline_url"),
        "body": body,
        "unsubscribe_html": unsubscribe_html,
    }
    return render_template(_LAYOUT, layout_vars, escape=True)


# =============================================================================
# Update
# =============================================================================

_UPDATE_HTML = """            <h2>Hi {{recipient_name}}!</h2>
            <p>{{parent_names}} just shared a new update from their pregnancy.</p>
            <div class="card">
                {{week_badge_html}}
                <h3>{{update_title}}</h3>
                <p>{{update_content}}</p>
                <p>Posted on {{update_date}}</p>
                {{photos_html}}
            </div>
            <p>Due date: <strong>{{due_date}}</strong> &bull; Currently at week <strong>{{current_week}}</strong></p>
            <a href="{{timeline_url}}" class="cta-button">View Full Timeline</a>"""

_UPDATE_TEXT = """New post from {{parent_names}}

Hi {{recipient_name}}!

{{parent_names}} just shared a new update!

{{week_prefix}}{{update_title}}

{{update_content}}

Posted on {{update_date}}{{photos_text}}

Due date: {{due_date}} - Currently at week {{current_week}}

View the full timeline: {{timeline_url}}
{{unsubscribe_text}}"""


def build_update_email(variables: dict[str, object]) -> RenderedEmail:
    week = variables.get("update_week")
    photo_count = int(variables.get("photo_count") or 0)
    values = dict(variables)
    values["week_badge_html"] = f'<div class="week-badge">Week {int(week)}</div>' if week else ""
    values["week_prefix"] = f"Week {week}: " if week else ""
    values["photos_html"] = f"<p>📸 {photo_count} photo(s) included</p>" if photo_count else ""
    values["photos_text"] = f"\n📸 {photo_count} photo(s) included" if photo_count else ""
    values["unsubscribe_text"] = _unsubscribe_text(values)
    return RenderedEmail(
        subject=generate_subject(EmailType.UPDATE, values),
        html_body=_wrap(
            _UPDATE_HTML,
            values,
            header_line=f"New pregnancy update from {values.get('parent_names', '')}",
            footer_line=f"You're receiving this because you're part of {values.get('parent_names', '')}'s pregnancy village.",
        ),
        text_body=render_template(_UPDATE_TEXT, values, escape=False),
    )


# =============================================================================
# Milestone
# =============================================================================

_MILESTONE_HTML = """            <h2>Hi {{recipient_name}}!</h2>
            <p>{{parent_names}} just reached a milestone.</p>
            <div class="card">
                <div class="week-badge">Week {{milestone_week}}</div>
                <h3>{{milestone_title}}</h3>
                <p>{{milestone_type}} &bull; {{milestone_date}}</p>
            </div>
            <a href="{{timeline_url}}" class="cta-button">View Full Timeline</a>"""

_MILESTONE_TEXT = """Milestone reached!

Hi {{recipient_name}}!

{{parent_names}} reached week {{milestone_week}}: {{milestone_title}} ({{milestone_date}}).

View the full timeline: {{timeline_url}}
{{unsubscribe_text}}"""


def build_milestone_email(variables: dict[str, object]) -> RenderedEmail:
    values = dict(variables)
    values["unsubscribe_text"] = _unsubscribe_text(values)
    return RenderedEmail(
        subject=generate_subject(EmailType.MILESTONE, values),
        html_body=_wrap(
            _MILESTONE_HTML,
            values,
            header_line=f"Milestone from {values.get('parent_names', '')}",
            footer_line=f"You're receiving this because you're part of {values.get('parent_names', '')}'s pregnancy village.",
        ),
        text_body=render_template(_MILESTONE_TEXT, values, escape=False),
    )


# =============================================================================
# Welcome
# =============================================================================

_WELCOME_HTML = """            <h2>Welcome, {{recipient_name}}!</h2>
            {{cover_html}}
            <p>{{parent_names}} have added you to their pregnancy village.</p>
            <p>Their due date is <strong>{{due_date}}</strong> and they're currently at week <strong>{{current_week}}</strong>.</p>
            <p>You'll get an email whenever they share an update.</p>
            <a href="{{timeline_url}}" class="cta-button">View Their Timeline</a>"""

_WELCOME_TEXT = """Welcome to {{parent_names}}'s pregnancy village!

Hi {{recipient_name}}!

{{parent_names}} have added you to their pregnancy village.
Due date: {{due_date}} - Currently at week {{current_week}}

You'll get an email whenever they share an update.

View their timeline: {{timeline_url}}
{{unsubscribe_text}}"""


def build_welcome_email(variables: dict[str, object]) -> RenderedEmail:
    values = dict(variables)
    cover_url = values.get("cover_photo_url")
    values["cover_html"] = (
        f'<img src="{html.escape(str(cover_url))}" alt="Cover photo" style="max-width: 100%; border-radius: 8px;">'
        if cover_url
        else ""
    )
    values["unsubscribe_text"] = _unsubscribe_text(values)
    return RenderedEmail(
        subject=generate_subject(EmailType.WELCOME, values),
        html_body=_wrap(
            _WELCOME_HTML,
            values,
            header_line=f"Welcome to {values.get('parent_names', '')}'s village",
            footer_line="You're receiving this because you were added to a pregnancy village.",
        ),
        text_body=render_template(_WELCOME_TEXT, values, escape=False),
    )


# =============================================================================
# Access request
# =============================================================================

_ACCESS_REQUEST_HTML = """            <h2>Hi {{parent_names}}!</h2>
            <p>You have a new request from someone who would like to follow your pregnancy timeline.</p>
            <div class="card">
                <p><strong>Requester:</strong> {{requester_name}}</p>
                <p><strong>Email:</strong> {{requester_email}}</p>
                <p><strong>Relationship:</strong> {{requester_relationship}}</p>
                {{message_html}}
            </div>
            <a href="{{dashboard_url}}" class="cta-button">Review Request</a>"""

_ACCESS_REQUEST_TEXT = """New Access Request

Hi {{parent_names}}!

You have a new request from someone who would like to follow your pregnancy timeline.

Requester: {{requester_name}}
Email: {{requester_email}}
Relationship: {{requester_relationship}}
{{message_text}}
You can approve or deny this request from your dashboard: {{dashboard_url}}

View your timeline: {{timeline_url}}"""


def build_access_request_email(variables: dict[str, object]) -> RenderedEmail:
    values = dict(variables)
    message = values.get("requester_message")
    values["message_html"] = (
        f'<p><strong>Message:</strong> "{html.escape(str(message))}"</p>' if message else ""
    )
    values["message_text"] = f'Message: "{message}"\n' if message else ""
    return RenderedEmail(
        subject=generate_subject(EmailType.ACCESS_REQUEST, values),
        html_body=_wrap(
            _ACCESS_REQUEST_HTML,
            values,
            header_line="New access request",
            footer_line="You can manage access requests and your village members from your dashboard.",
        ),
        text_body=render_template(_ACCESS_REQUEST_TEXT, values, escape=False),
    )


# =============================================================================
# Test
# =============================================================================

_TEST_HTML = """            <h2>Test Email from {{sender_name}}</h2>
            <p>Hello {{recipient_name}}!</p>
            <p>This is a test email to verify that your email configuration is working correctly.</p>
            <p>If you received this email, your AWS SES setup is functioning properly.</p>
            <p>Sent at: {{sent_at}}</p>"""

_TEST_TEXT = """Test Email from {{sender_name}}

Hello {{recipient_name}}!

This is a test email to verify that your email configuration is working correctly.
If you received this email, your AWS SES setup is functioning properly.

Sent at: {{sent_at}}"""


def build_test_email(variables: dict[str, object]) -> RenderedEmail:
    return RenderedEmail(
        subject=generate_subject(EmailType.TEST, variables),
        html_body=_wrap(
            _TEST_HTML,
            variables,
            header_line="Email configuration test",
            footer_line="This message was sent from the email settings page.",
        ),
        text_body=render_template(_TEST_TEXT, variables, escape=False),
    )


def _unsubscribe_text(variables: dict[str, object]) -> str:
    url = variables.get("unsubscribe_url")
    return f"\nUnsubscribe: {url}" if url else ""

from flask import current_app
from markupsafe import escape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

_LAYOUT = """<!DOCTYPE html>
<html>
<head>
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background-color: #f4f4f4; padding: 20px; text-align: center; }}
    .content {{ padding: 20px; background-color: #fff; }}
    .button {{ display: inline-block; padding: 10px 20px; background-color: #2563eb; color: white; text-decoration: none; border-radius: 5px; margin-top: 10px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h2>{title} - Nirmaan Pre-Incubation</h2></div>
    <div class="content">
      {body}
      <p>Thanks,<br>Team Nirmaan</p>
    </div>
  </div>
</body>
</html>"""


def send_email(to_emails, subject, html):
    """Send one message through SendGrid.

    Returns ``(status_code, message_id)``, or ``None`` when no API key is
    configured and the mail was skipped.
    """
    api_key = current_app.config.get("SENDGRID_API_KEY")
    if not api_key:
        current_app.logger.warning("SENDGRID_API_KEY not set, skipping mail %r", subject)
        return None
    sg = SendGridAPIClient(api_key=api_key)
    sg.client.timeout = current_app.config.get("NOTIFY_TIMEOUT_SECONDS", 15)
    message = Mail(from_email=(current_app.config["MAIL_FROM"], current_app.config["MAIL_FROM_NAME"]),
                   to_emails=to_emails,
                   subject=subject,
                   html_content=html)
    resp = sg.send(message)
    headers = getattr(resp, "headers", None) or {}
    return resp.status_code, headers.get("X-Message-Id")


def _link(path):
    return current_app.config.get("APP_URL", "").rstrip("/") + path


def _button(href, label):
    return f'<p><a href="{escape(href)}" class="button">{escape(label)}</a></p>'


def render(title, body):
    return _LAYOUT.format(title=escape(title), body=body)


def reviewer_invite(reviewer_name, startup_name):
    subject = f"You have been assigned to review: {startup_name}"
    body = (
        f"<p>Dear {escape(reviewer_name)},</p>"
        "<p>You have been assigned to review the following startup application:</p>"
        f"<p><strong>Startup: {escape(startup_name)}</strong></p>"
        "<p>Please log in to accept or decline this assignment and submit your evaluation.</p>"
        + _button(_link("/login"), "Login")
    )
    return subject, render("Reviewer Assignment", body)


def reviewer_response(reviewer_name, startup_name, application_id, accepted):
    reviewer, startup = escape(reviewer_name), escape(startup_name)
    if accepted:
        subject = f"Reviewer accepted: {reviewer_name} - {startup_name}"
        message = (f"The reviewer <strong>{reviewer}</strong> has <strong>accepted</strong> "
                   f"the evaluation request for the startup <strong>{startup}</strong>.")
    else:
        subject = f"Reviewer declined: {reviewer_name} - {startup_name}"
        message = (f"The reviewer <strong>{reviewer}</strong> has <strong>declined</strong> "
                   f"the evaluation request for the startup <strong>{startup}</strong>. "
                   "Please assign another reviewer if needed.")
    body = f"<p>{message}</p>" + _button(_link(f"/dashboard/applications/{application_id}"), "View application")
    return subject, render("Evaluation Request Update", body)


def invite_expired(reviewer_name, startup_name, application_id, expire_days):
    subject = f"Reviewer invite auto-expired: {reviewer_name} - {startup_name}"
    message = (f"The evaluation request for <strong>{escape(reviewer_name)}</strong> for the startup "
               f"<strong>{escape(startup_name)}</strong> was automatically rejected after {int(expire_days)} days "
               "(no response). Please assign a new reviewer if needed.")
    body = f"<p>{message}</p>" + _button(_link(f"/dashboard/applications/{application_id}"), "View application")
    return subject, render("Evaluation Request Update", body)


def draft_resume_link(team_name, token):
    subject = "Continue your Nirmaan pre-incubation application"
    body = (
        f"<p>Hello{(' ' + str(escape(team_name))) if team_name else ''},</p>"
        "<p>Your application has been saved as a draft. Use the link below to pick up where you left off. "
        "The link stays valid for 30 days.</p>"
        + _button(_link(f"/apply/resume?token={token}"), "Resume application")
    )
    return subject, render("Application Draft Saved", body)


def user_welcome(full_name, email, password, role):
    subject = "Your Nirmaan Pre-Incubation account"
    body = (
        f"<p>Dear {escape(full_name)},</p>"
        f"<p>An account with the <strong>{escape(role)}</strong> role has been created for you.</p>"
        f"<p>Email: <strong>{escape(email)}</strong><br>Temporary password: <strong>{escape(password)}</strong></p>"
        "<p>Please change your password after your first login.</p>"
        + _button(_link("/login"), "Login")
    )
    return subject, render("Welcome", body)

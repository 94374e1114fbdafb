"""
New-assignment emails via the Resend API.

Delivery is best effort: a missing API key or a failed send is logged and
never propagates into the request that already committed its state change.
"""

import logging

import resend
from flask import current_app

logger = logging.getLogger(__name__)


def _assignment_email_html(assignment, classroom, app_url):
    deadline = assignment.deadline.strftime('%A, %B %d, %Y %I:%M %p')
    description = assignment.description or 'No additional details.'
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h1 style="background-color: #4f46e5; color: white; padding: 20px;">New Assignment Posted</h1>
      <h2>{assignment.title}</h2>
      <p><strong>Classroom:</strong> {classroom.display_name}</p>
      <p><strong>Due Date:</strong> {deadline}</p>
      <p><strong>Assignment Details:</strong><br>{description}</p>
      <p><a href="{app_url}/assignments">View Assignment</a></p>
      <p style="color: #6b7280; font-size: 14px;">This is an automated message from your classroom management system.</p>
    </div>
    """


def send_assignment_emails(assignment, classroom, recipients):
    """Email every recipient that has an address. Returns the number sent."""
    api_key = current_app.config.get('RESEND_API_KEY')
    if not api_key:
        logger.info("RESEND_API_KEY not configured; skipping assignment emails for assignment %s", assignment.id)
        return 0

    resend.api_key = api_key
    html = _assignment_email_html(assignment, classroom, current_app.config.get('APP_URL', ''))
    sent = 0
    for user in recipients:
        if not user.email:
            continue
        try:
            resend.Emails.send({
                'from': current_app.config['RESEND_FROM_EMAIL'],
                'to': [user.email],
                'subject': f"New Assignment: {assignment.title}",
                'html': html,
            })
            sent += 1
        except Exception as e:
            logger.warning("Failed to email %s about assignment %s: %s", user.email, assignment.id, e)
    return sent

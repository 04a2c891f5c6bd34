# app/services/email_service.py
"""
Best-effort email notifications for task assignment and status changes.

Sending is synchronous (smtplib); the ``dispatch_*`` helpers run it on a
daemon thread so the request never waits on the mail server and a failed
send never reaches the HTTP response.
"""

import logging
import smtplib
import threading
from datetime import datetime
from email.message import EmailMessage
from typing import Any, Dict, Optional

from app.config.settings import AppConfig
from app.database import SessionLocal
from app.models import Task

logger = logging.getLogger(__name__)

PRIORITY_COLORS = {
    "low": "#4CAF50",
    "medium": "#FF9800",
    "high": "#FF5722",
    "urgent": "#F44336",
}


def get_priority_color(priority: str) -> str:
    return PRIORITY_COLORS.get(priority, "#666")


def _format_deadline(deadline: Any) -> str:
    if isinstance(deadline, datetime):
        return deadline.strftime("%Y-%m-%d")
    return str(deadline)


def _send_mail(to: str, subject: str, html: str) -> None:
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = AppConfig.MAIL["from_address"]
    message["To"] = to
    message.set_content("This message requires an HTML capable mail client.")
    message.add_alternative(html, subtype="html")

    with smtplib.SMTP(AppConfig.MAIL["host"], AppConfig.MAIL["port"], timeout=AppConfig.MAIL["timeout"]) as smtp:
        smtp.starttls()
        smtp.login(AppConfig.MAIL["user"], AppConfig.MAIL["password"])
        smtp.send_message(message)


def send_task_notification(to: str, task_details: Dict[str, Any]) -> bool:
    """
    Email a newly assigned task to its assignee.

    Args:
        to: Recipient address
        task_details: ``task_title``, ``assigned_by``, ``deadline``, ``priority``

    Returns:
        True when the mail was handed to the SMTP server, False when mail
        is not configured. SMTP errors propagate to the caller.
    """
    if not AppConfig.is_mail_configured():
        logger.info("Email service not configured. Skipping notification.")
        return False

    priority = task_details.get("priority", "medium")
    html = f"""
        <div style="font-family: Arial, sans-serif; padding: 20px;">
          <h2 style="color: #333;">New Task Assigned</h2>
          <p>You have been assigned a new task by {task_details.get("assigned_by")}.</p>

          <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">
            <h3 style="color: #555; margin-top: 0;">{task_details.get("task_title")}</h3>
            <p><strong>Priority:</strong> <span style="text-transform: uppercase; color: {get_priority_color(priority)};">{priority}</span></p>
            <p><strong>Deadline:</strong> {_format_deadline(task_details.get("deadline"))}</p>
          </div>

          <p>Please log in to your account to view task details and start working on it.</p>

          <a href="{AppConfig.MAIL["client_url"]}/login" style="display: inline-block; background-color: #4CAF50; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px; margin-top: 10px;">
            View Task
          </a>
        </div>
    """
    _send_mail(to, f"New Task Assigned: {task_details.get('task_title')}", html)
    logger.info(f"Task notification sent to {to}")
    return True


def send_task_update_notification(to: str, task_details: Dict[str, Any]) -> bool:
    """Email a status change (``task_title``, ``status``, ``updated_by``)"""
    if not AppConfig.is_mail_configured():
        logger.info("Email service not configured. Skipping notification.")
        return False

    html = f"""
        <div style="font-family: Arial, sans-serif; padding: 20px;">
          <h2 style="color: #333;">Task Status Updated</h2>
          <p>A task has been updated.</p>

          <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">
            <h3 style="color: #555; margin-top: 0;">{task_details.get("task_title")}</h3>
            <p><strong>New Status:</strong> <span style="text-transform: uppercase;">{task_details.get("status")}</span></p>
            <p><strong>Updated By:</strong> {task_details.get("updated_by")}</p>
          </div>

          <a href="{AppConfig.MAIL["client_url"]}/login" style="display: inline-block; background-color: #4CAF50; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px; margin-top: 10px;">
            View Task
          </a>
        </div>
    """
    _send_mail(to, f"Task Updated: {task_details.get('task_title')}", html)
    logger.info(f"Task update notification sent to {to}")
    return True


def mark_notification_sent(task_id: int) -> None:
    db = SessionLocal()
    try:
        task = db.query(Task).filter(Task.id == task_id).first()
        if task:
            task.notification_sent = True
            db.commit()
    finally:
        db.close()


def _run_in_background(target, *args) -> threading.Thread:
    # Run in a separate thread to avoid blocking the main request
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    return thread


def dispatch_task_notification(to: str, task_details: Dict[str, Any], task_id: Optional[int] = None) -> threading.Thread:
    """Fire-and-forget assignment email; failures are logged and dropped"""

    def run_notification():
        try:
            if send_task_notification(to, task_details) and task_id is not None:
                mark_notification_sent(task_id)
        except Exception:
            logger.exception(f"Email notification error for {to}")

    return _run_in_background(run_notification)


def dispatch_task_update_notification(to: str, task_details: Dict[str, Any]) -> threading.Thread:
    """Fire-and-forget status update email"""

    def run_notification():
        try:
            send_task_update_notification(to, task_details)
        except Exception:
            logger.exception(f"Email update notification error for {to}")

    return _run_in_background(run_notification)

"""管理员通知服务（新评论、点赞、分享、联系留言）"""
import smtplib
from email.message import EmailMessage
from threading import Thread

from flask import current_app

from cyberscroll.extensions import db
from cyberscroll.models import User, ADMIN_USER_ID


class NotificationService:
    """管理员邮件通知"""

    TEMPLATES = {
        'comment': ('New Comment on "{article_title}"',
                    '{author} ({email}) commented on "{article_title}":\n\n{content}'),
        'like': ('New Like on "{article_title}"',
                 'Visitor {visitor_id} liked "{article_title}".'),
        'share': ('Content Shared: "{article_title}"',
                  'Visitor {visitor_id} shared "{article_title}" on {platform}.'),
        'contact': ('New Contact Message: {subject}',
                    'From: {name} <{email}>\nSubject: {subject}\n\n{message}'),
    }

    @staticmethod
    def admin_email():
        admin = db.session.get(User, ADMIN_USER_ID) or User.query.filter_by(role=User.ROLE_ADMIN).first()
        return admin.email if admin else None

    @staticmethod
    def render(kind, **data):
        subject_tpl, body_tpl = NotificationService.TEMPLATES[kind]
        return subject_tpl.format(**data), body_tpl.format(**data)

    @staticmethod
    def notify_admin(kind, **data):
        """
        发送管理员通知
        未配置 EMAIL_USER/EMAIL_PASS 时只记录日志；否则交给后台线程发送，不阻塞访客请求
        :return: 是否已交给发送线程
        """
        subject, body = NotificationService.render(kind, **data)
        config = current_app.config

        if not config.get('EMAIL_USER') or not config.get('EMAIL_PASS'):
            current_app.logger.info(f'[notify:{kind}] {subject}')
            return False

        recipient = NotificationService.admin_email()
        if not recipient:
            current_app.logger.warning(f'[notify:{kind}] 没有管理员邮箱，跳过通知')
            return False

        message = EmailMessage()
        message['Subject'] = subject
        message['From'] = config['EMAIL_USER']
        message['To'] = recipient
        message.set_content(body)

        smtp_settings = {key: config[key] for key in ('SMTP_HOST', 'SMTP_PORT', 'EMAIL_USER', 'EMAIL_PASS')}
        Thread(target=send_mail, args=(smtp_settings, message, kind, current_app.logger),
               name=f'notify-{kind}', daemon=True).start()
        return True


def send_mail(settings, message, kind, logger):
    """后台线程中发送邮件，失败只记录日志"""
    try:
        with smtplib.SMTP(settings['SMTP_HOST'], settings['SMTP_PORT'], timeout=10) as smtp:
            smtp.starttls()
            smtp.login(settings['EMAIL_USER'], settings['EMAIL_PASS'])
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f'[notify:{kind}] 邮件发送失败: {e}')
        return False

    logger.info(f"[notify:{kind}] 已通知管理员 {message['To']}")
    return True

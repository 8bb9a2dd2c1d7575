"""
演示数据
内存库在每次启动时为空，这里写入管理员、分类、已发布文章与访客互动
"""
import random
from datetime import datetime, timedelta

from cyberscroll.extensions import db
from cyberscroll.models import (User, Article, Category, Comment, Like, ContactMessage, Document,
                                ADMIN_USER_ID)
from cyberscroll.services.article_service import ArticleService
from cyberscroll.utils.fake_gen import fake

ADMIN_EMAIL = 'francis@cyberscroll.com'
ADMIN_PASSWORD = 'password'

CATEGORIES = [
    ('ThreatIntel', 'Threat intelligence and analysis', '#ef4444', 8),
    ('VendorRisk', 'Third-party vendor risk management', '#3b82f6', 5),
    ('Detection', 'Security detection and monitoring', '#10b981', 6),
    ('Compliance', 'Regulatory compliance and governance', '#f59e0b', 4),
    ('ZeroDay', 'Zero-day vulnerability research', '#8b5cf6', 3),
    ('IncidentResponse', 'Security incident response procedures', '#ec4899', 4),
    ('CloudSec', 'Cloud security best practices', '#06b6d4', 3),
    ('PenTesting', 'Penetration testing methodologies', '#84cc16', 2),
]

ARTICLES = [
    {
        'title': 'Advanced Threat Detection Techniques',
        'content': '# Advanced Threat Detection\n\nThis article covers modern threat detection methods...',
        'excerpt': 'Learn about cutting-edge threat detection techniques used by security professionals.',
        'tags': ['ThreatIntel', 'Detection'],
        'published_at': datetime(2024, 1, 15),
        'views': 1250, 'like_count': 89, 'comment_count': 12,
    },
    {
        'title': 'Vendor Risk Management Best Practices',
        'content': '# Vendor Risk Management\n\nManaging third-party vendor risks is crucial...',
        'excerpt': 'Essential strategies for managing vendor risks in enterprise environments.',
        'tags': ['VendorRisk', 'Compliance'],
        'published_at': datetime(2024, 1, 12),
        'views': 890, 'like_count': 67, 'comment_count': 8,
    },
    {
        'title': 'Zero-Day Vulnerability Response',
        'content': '# Zero-Day Vulnerability Response\n\nWhen zero-day vulnerabilities are discovered...',
        'excerpt': 'How to respond effectively to zero-day vulnerabilities in your infrastructure.',
        'tags': ['ZeroDay', 'IncidentResponse'],
        'published_at': datetime(2024, 1, 10),
        'views': 2100, 'like_count': 156, 'comment_count': 23,
    },
]


def create_admin():
    admin = User(
        id=ADMIN_USER_ID,
        name='Francis Bockarie',
        email=ADMIN_EMAIL,
        role=User.ROLE_ADMIN,
        job_title='Security Analyst',
        organization='CyberScroll',
        bio='Cybersecurity professional focused on threat intelligence and vendor risk.',
    )
    admin.password = ADMIN_PASSWORD
    db.session.add(admin)
    return admin


def create_categories():
    for name, description, color, usage in CATEGORIES:
        db.session.add(Category(name=name, description=description, color=color, usage_count=usage))


def create_articles(admin):
    articles = []
    for fields in ARTICLES:
        article = Article(
            author_id=admin.id,
            visibility=Article.VISIBILITY_PUBLIC,
            status=Article.STATUS_PUBLISHED,
            created_at=fields['published_at'],
            updated_at=fields['published_at'],
            **fields
        )
        db.session.add(article)
        db.session.flush()
        ArticleService.check_featured(article)
        articles.append(article)
    return articles


def create_engagement(articles):
    first, second = articles[0], articles[1]
    db.session.add_all([
        Comment(article_id=first.id, author='SecurityPro', email='pro@securemail.com',
                content='Great article! The threat detection techniques you mentioned are spot on.',
                status=Comment.STATUS_APPROVED, created_at=datetime(2024, 1, 16)),
        Comment(article_id=first.id, author='CyberAnalyst', email='analyst@securemail.com',
                content='Very informative. Would love to see more content on this topic.',
                status=Comment.STATUS_APPROVED, created_at=datetime(2024, 1, 17)),
        Like(article_id=first.id, visitor_id='visitor1'),
        Like(article_id=first.id, visitor_id='visitor2'),
        Like(article_id=second.id, visitor_id='visitor1'),
        ContactMessage(name='John Doe', email='john@securemail.com',
                       subject='Question about threat detection',
                       message='Hi Francis, I have a question about the threat detection techniques...',
                       status=ContactMessage.STATUS_UNREAD, created_at=datetime(2024, 1, 18)),
    ])


def create_documents(admin, articles):
    db.session.add_all([
        Document(user_id=admin.id, file_name='Security_Audit_Report_2024.pdf',
                 original_name='Security_Audit_Report_2024.pdf',
                 file_path='uploads/security-audit-2024.pdf', file_type='application/pdf',
                 file_size=2400000, tags=['Audit', 'Report'], linked_article_id=articles[0].id,
                 description='Annual security audit report', created_at=datetime(2024, 1, 15)),
        Document(user_id=admin.id, file_name='Vendor_Assessment_Template.docx',
                 original_name='Vendor_Assessment_Template.docx',
                 file_path='uploads/vendor-assessment-template.docx',
                 file_type='application/vnd.openxmlformats-officedocument.wordprocessingml.document',
                 file_size=1800000, tags=['Template', 'VendorRisk'], linked_article_id=None,
                 description='Template for vendor risk assessments', created_at=datetime(2024, 1, 12)),
    ])


def seed_mock_data():
    """
    写入启动演示数据
    :return: 各实体数量
    """
    admin = create_admin()
    create_categories()
    db.session.flush()

    articles = create_articles(admin)
    db.session.flush()

    create_engagement(articles)
    create_documents(admin, articles)
    db.session.commit()

    return entity_counts()


def forge_fake_data(scale=1):
    """
    用 Faker 生成额外的已发布文章和访客评论
    :param scale: 数据规模倍数，每倍 10 篇文章
    """
    admin = db.session.get(User, ADMIN_USER_ID)
    now = datetime.utcnow()
    article_count = 10 * scale

    for _ in range(article_count):
        tags = fake.security_tags_sample()
        published = now - timedelta(days=random.randint(1, 365))
        article = Article(
            author_id=admin.id,
            title=fake.security_title(),
            content=fake.markdown_body(),
            tags=tags,
            visibility=random.choice([Article.VISIBILITY_PUBLIC] * 3 + [Article.VISIBILITY_PRIVATE]),
            status=Article.STATUS_PUBLISHED,
            published_at=published,
            created_at=published,
            views=random.randint(0, 3000),
            like_count=random.randint(0, 40),
            share_count=random.randint(0, 10),
        )
        article.excerpt = ArticleService.make_excerpt(article.content)
        ArticleService.sync_category_usage([], tags)
        db.session.add(article)
        db.session.flush()

        for _ in range(random.randint(0, 4)):
            db.session.add(Comment(
                article_id=article.id,
                author=fake.security_handle(),
                email=fake.email(),
                content=fake.sentence(nb_words=16),
                status=Comment.STATUS_APPROVED,
            ))
            ArticleService.bump(article, 'comment_count')
        ArticleService.check_featured(article)

    db.session.commit()
    return article_count


def entity_counts():
    return {
        'users': User.query.count(),
        'articles': Article.query.count(),
        'categories': Category.query.count(),
        'comments': Comment.query.count(),
        'likes': Like.query.count(),
        'messages': ContactMessage.query.count(),
        'documents': Document.query.count(),
    }

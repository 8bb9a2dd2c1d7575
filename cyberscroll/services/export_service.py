"""
数据导出服务
支持 JSON、CSV 格式导出
"""
import csv
import io
from io import BytesIO
from datetime import datetime
from typing import List, Dict, Any

from cyberscroll.models import Article, Document

ARTICLE_COLUMNS = [
    {'field': 'id', 'header': 'ID'},
    {'field': 'title', 'header': 'Title'},
    {'field': 'status', 'header': 'Status'},
    {'field': 'visibility', 'header': 'Visibility'},
    {'field': 'tags', 'header': 'Tags'},
    {'field': 'views', 'header': 'Views'},
    {'field': 'likeCount', 'header': 'Likes'},
    {'field': 'commentCount', 'header': 'Comments'},
    {'field': 'createdAt', 'header': 'Created At'},
    {'field': 'updatedAt', 'header': 'Updated At'},
]


class ExportService:
    """用户数据导出服务"""

    @staticmethod
    def export_to_csv(
        data: List[Dict[str, Any]],
        columns: List[Dict[str, str]]
    ) -> BytesIO:
        """
        导出数据到 CSV

        Args:
            data: 数据列表
            columns: 列定义 [{"field": "title", "header": "Title"}, ...]

        Returns:
            BytesIO: CSV 文件流（UTF-8 with BOM）
        """
        text_output = io.StringIO()

        writer = csv.DictWriter(
            text_output,
            fieldnames=[col['field'] for col in columns],
            extrasaction='ignore'
        )

        # 写入表头
        writer.writerow({col['field']: col['header'] for col in columns})

        for row in data:
            processed_row = {}
            for col in columns:
                field = col['field']
                value = row.get(field, '')

                if isinstance(value, datetime):
                    value = value.strftime('%Y-%m-%d %H:%M:%S')
                elif isinstance(value, (list, tuple)):
                    value = ', '.join(str(v) for v in value)
                elif value is None:
                    value = ''

                processed_row[field] = value

            writer.writerow(processed_row)

        output = BytesIO()
        output.write('\ufeff'.encode('utf-8'))
        output.write(text_output.getvalue().encode('utf-8'))
        output.seek(0)
        return output

    @staticmethod
    def build_user_export(user, include_documents=True, include_settings=True) -> Dict[str, Any]:
        """汇总用户的个人资料、偏好、文章与文件"""
        articles = Article.query.filter_by(author_id=user.id).order_by(Article.created_at.desc()).all()
        payload = {
            'exportedAt': datetime.utcnow().isoformat(),
            'profile': user.to_dict(),
            'articles': [a.to_dict() for a in articles],
        }
        if include_settings:
            payload['preferences'] = dict(user.preferences or {})
        if include_documents:
            documents = Document.query.filter_by(user_id=user.id).order_by(Document.created_at.desc()).all()
            payload['documents'] = [d.to_dict() for d in documents]
        return payload

    @staticmethod
    def export_articles_csv(user) -> BytesIO:
        articles = Article.query.filter_by(author_id=user.id).order_by(Article.created_at.desc()).all()
        return ExportService.export_to_csv([a.to_dict() for a in articles], ARTICLE_COLUMNS)

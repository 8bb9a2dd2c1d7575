import os

from flask import jsonify, request, send_file, current_app

from cyberscroll.blueprints.uploads import uploads_bp
from cyberscroll.blueprints.uploads.forms import DocumentMetaForm, DocumentListForm
from cyberscroll.exceptions import ValidationError, NotFound
from cyberscroll.extensions import db
from cyberscroll.models import Document
from cyberscroll.utils.file_helper import check_upload, save_file, remove_file, matches_type
from cyberscroll.utils.pagination import paginate_list
from cyberscroll.utils.permissions import token_required, ensure_owner, current_claims
from cyberscroll.utils.validators import validate_uuid_param

FILES_FIELD = 'files'


def get_document_or_404(document_id):
    """按 ID 获取文件记录并检查归属"""
    validate_uuid_param(document_id)
    document = db.session.get(Document, document_id)
    if document is None:
        raise NotFound('Document does not exist', error='Document not found')
    ensure_owner(document.user_id, 'You can only access your own documents')
    return document


def incoming_files():
    """
    取出 multipart 中的文件
    只接受 files 字段，单次数量受 MAX_FILES_PER_REQUEST 限制
    """
    unexpected = [key for key in request.files.keys() if key != FILES_FIELD]
    if unexpected:
        raise ValidationError(f'Unexpected file field: {unexpected[0]}', error='Unexpected file field')

    files = [f for f in request.files.getlist(FILES_FIELD) if f and f.filename]
    if not files:
        raise ValidationError('Please select at least one file to upload', error='No files uploaded')

    max_files = current_app.config['MAX_FILES_PER_REQUEST']
    if len(files) > max_files:
        raise ValidationError(f'Maximum {max_files} files allowed per upload', error='Too many files')
    return files


@uploads_bp.route('/', methods=['POST'])
@token_required
def upload_files():
    files = incoming_files()
    form = DocumentMetaForm().validate_or_raise()

    # 全部检查通过后再落盘，避免部分保存
    for file in files:
        check_upload(file)

    documents = []
    for file in files:
        original_name, stored_name, file_path, file_size, mimetype = save_file(file)
        document = Document(
            user_id=current_claims().user_id,
            file_name=stored_name,
            original_name=original_name,
            file_path=file_path,
            file_type=mimetype,
            file_size=file_size,
            tags=form.tags.data,
            linked_article_id=form.linked_article_id.data or None,
            description=form.description.data or '',
        )
        db.session.add(document)
        documents.append(document)
    db.session.commit()

    current_app.logger.info(f'上传完成: {len(documents)} 个文件 by {current_claims().email}')
    return jsonify({
        'message': f'{len(documents)} file(s) uploaded successfully',
        'files': [d.to_dict() for d in documents],
    }), 201


@uploads_bp.route('/')
@token_required
def list_documents():
    """当前用户的文件列表"""
    form = DocumentListForm.parse()
    page, limit = form.paging

    query = Document.query.filter_by(user_id=current_claims().user_id)
    order = Document.created_at.desc() if form.descending else Document.created_at.asc()
    documents = query.order_by(order, Document.id).all()

    if form.search.data:
        term = form.search.data.lower()
        documents = [
            d for d in documents
            if term in (d.original_name or '').lower()
            or term in (d.description or '').lower()
            or any(term in tag.lower() for tag in d.tags or [])
        ]

    if form.file_type.data:
        documents = [d for d in documents if matches_type(d.file_type, form.file_type.data)]

    page_items, pagination = paginate_list(documents, page, limit)
    return jsonify({'documents': [d.to_dict() for d in page_items], 'pagination': pagination})


@uploads_bp.route('/<document_id>')
@token_required
def get_document(document_id):
    return jsonify({'document': get_document_or_404(document_id).to_dict()})


@uploads_bp.route('/<document_id>', methods=['PUT'])
@token_required
def update_document(document_id):
    """更新标签、关联文章、描述"""
    document = get_document_or_404(document_id)
    form = DocumentMetaForm().validate_or_raise()
    changes = form.supplied_data()

    if 'tags' in changes:
        document.tags = list(changes['tags'])
    if 'linked_article_id' in changes:
        document.linked_article_id = changes['linked_article_id'] or None
    if 'description' in changes:
        document.description = changes['description'] or ''

    document.save()
    return jsonify({'message': 'Document updated successfully', 'document': document.to_dict()})


@uploads_bp.route('/<document_id>', methods=['DELETE'])
@token_required
def delete_document(document_id):
    """删除记录和磁盘文件（文件缺失只记录日志）"""
    document = get_document_or_404(document_id)
    remove_file(document.file_path)
    document.delete()

    current_app.logger.info(f'文件已删除: {document_id}')
    return jsonify({'message': 'Document deleted successfully'})


@uploads_bp.route('/download/<document_id>')
@token_required
def download_document(document_id):
    document = get_document_or_404(document_id)
    if not document.file_path or not os.path.isfile(document.file_path):
        raise NotFound('File not found on server', error='File not found')

    return send_file(
        os.path.abspath(document.file_path),
        mimetype=document.file_type,
        as_attachment=True,
        download_name=document.original_name,
    )

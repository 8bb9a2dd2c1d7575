import os
import uuid

from PIL import Image
from flask import current_app
from werkzeug.utils import secure_filename

from cyberscroll.exceptions import ValidationError, FileTooLarge

# MIME 类型 -> 保存时允许保留的扩展名
ALLOWED_MIME_TYPES = {
    'application/pdf': {'.pdf'},
    'application/msword': {'.doc'},
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document': {'.docx'},
    'image/jpeg': {'.jpg', '.jpeg'},
    'image/png': {'.png'},
    'image/gif': {'.gif'},
    'application/zip': {'.zip'},
    'application/x-zip-compressed': {'.zip'},
    'application/x-rar-compressed': {'.rar'},
    'application/vnd.rar': {'.rar'},
    'text/plain': {'.txt', '.log'},
    'text/markdown': {'.md', '.markdown'},
}

AVATAR_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif'}

# 列表页 type 过滤的分组
TYPE_GROUPS = {
    'images': ('image/',),
    'documents': ('pdf', 'word', 'document', 'text/'),
    'archives': ('zip', 'rar', 'compressed'),
}


def get_file_extension(filename):
    """从文件名获取扩展名"""
    if not filename or '.' not in filename:
        return None
    return filename.rsplit('.', 1)[1].lower()


def allowed_mimetype(mimetype):
    return (mimetype or '').split(';')[0].strip().lower() in ALLOWED_MIME_TYPES


def file_size_of(file):
    """读取上传流的大小（不改变读取位置）"""
    stream = file.stream
    position = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(position)
    return size


def check_upload(file):
    """
    保存前的检查：文件名、大小、类型
    :raises FileTooLarge / ValidationError
    """
    if not file or not file.filename:
        raise ValidationError('No files uploaded')

    if file_size_of(file) > current_app.config['MAX_FILE_SIZE']:
        raise FileTooLarge(f'{file.filename} exceeds the '
                           f'{format_size(current_app.config["MAX_FILE_SIZE"])} limit')

    if not allowed_mimetype(file.mimetype):
        raise ValidationError(f'Invalid file type: {file.mimetype or "unknown"}',
                              error='Invalid file type')


def save_file(file):
    """
    安全保存文件（UUID 文件名防止覆盖）
    返回: (original_name, saved_filename, file_path, file_size, mimetype)
    """
    check_upload(file)

    original_filename = file.filename
    mimetype = (file.mimetype or 'application/octet-stream').split(';')[0].strip().lower()
    unique_name = str(uuid.uuid4()) + safe_extension(original_filename, mimetype)

    upload_folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(upload_folder, exist_ok=True)

    save_path = os.path.join(upload_folder, unique_name)
    file.save(save_path)

    file_size = os.path.getsize(save_path)
    current_app.logger.info(f'save_file: {original_filename} -> {unique_name} ({format_size(file_size)})')

    return original_filename, unique_name, save_path, file_size, mimetype


def safe_extension(filename, mimetype):
    """
    保存用的扩展名：先经 secure_filename 清洗，且必须与 MIME 类型相符
    不符合时返回空串（文件以无扩展名保存）
    """
    ext = os.path.splitext(secure_filename(filename or ''))[1].lower()
    if ext in ALLOWED_MIME_TYPES.get(mimetype, ()):
        return ext
    return ''


def remove_file(path):
    """删除磁盘文件，文件不存在时只记录日志"""
    if not path:
        return False
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        current_app.logger.warning(f'remove_file: 文件不存在 {path}')
        return False


def format_size(size):
    """将字节转换为易读格式"""
    if not size:
        return '0 Bytes'
    power = 2**10
    n = 0
    power_labels = {0: 'Bytes', 1: 'KB', 2: 'MB', 3: 'GB', 4: 'TB'}
    while size >= power and n < 4:
        size /= power
        n += 1
    if n == 0:
        return f"{size} Bytes"
    return f"{round(size, 2):g} {power_labels[n]}"


def matches_type(mimetype, type_filter):
    """type 过滤：images / documents / archives 分组，否则按 MIME 子串匹配"""
    mimetype = (mimetype or '').lower()
    type_filter = type_filter.lower()
    markers = TYPE_GROUPS.get(type_filter)
    if markers is None:
        return type_filter in mimetype
    return any(marker in mimetype for marker in markers)


def save_avatar(file):
    """保存头像图片，生成 200x200 正方形缩略图，返回访问 URL"""
    if not file or not file.filename:
        raise ValidationError('No avatar file provided')

    ext = '.' + (get_file_extension(file.filename) or '')
    if ext not in AVATAR_EXTENSIONS:
        raise ValidationError(f'Unsupported avatar format: {ext}', error='Invalid file type')

    if file_size_of(file) > current_app.config['MAX_FILE_SIZE']:
        raise FileTooLarge('Avatar exceeds the upload size limit')

    filename = f"{uuid.uuid4().hex}{ext}"
    avatar_dir = os.path.join(current_app.config['UPLOAD_FOLDER'], 'avatars')
    os.makedirs(avatar_dir, exist_ok=True)
    filepath = os.path.join(avatar_dir, filename)

    try:
        image = Image.open(file.stream)
        image.load()
    except (OSError, Image.DecompressionBombError):
        raise ValidationError('Avatar is not a valid image', error='Invalid file type')

    # 转换为RGB（处理RGBA/PNG）
    if ext in ('.jpg', '.jpeg') and image.mode != 'RGB':
        background = Image.new('RGB', image.size, (255, 255, 255))
        if image.mode == 'P':
            image = image.convert('RGBA')
        background.paste(image, mask=image.split()[-1] if image.mode in ('RGBA', 'LA') else None)
        image = background

    # 裁剪为正方形后缩放
    width, height = image.size
    if width != height:
        size = min(width, height)
        left = (width - size) // 2
        top = (height - size) // 2
        image = image.crop((left, top, left + size, top + size))
    image.thumbnail((200, 200), Image.Resampling.LANCZOS)

    if ext in ('.jpg', '.jpeg'):
        image.save(filepath, 'JPEG', quality=90, optimize=True)
    elif ext == '.png':
        image.save(filepath, 'PNG', optimize=True)
    else:
        image.save(filepath, 'GIF')

    current_app.logger.info(f'save_avatar: 头像已保存 {filepath}')
    return f'/uploads/avatars/{filename}'

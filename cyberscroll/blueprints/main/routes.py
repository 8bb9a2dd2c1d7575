import time
from datetime import datetime, timezone

from flask import jsonify, current_app, send_from_directory

from . import main_bp

# 进程启动时间，用于计算 uptime
STARTED_AT = time.monotonic()


@main_bp.route('/health')
def health():
    """健康检查"""
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'uptime': round(time.monotonic() - STARTED_AT, 3),
    })


@main_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    """访问已上传的文件（含头像）"""
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)

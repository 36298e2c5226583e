import os
import uuid
from werkzeug.utils import secure_filename
from flask import current_app

IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp', 'svg'}
FILE_EXTENSIONS = IMAGE_EXTENSIONS | {'pdf', 'doc', 'docx', 'xls', 'xlsx', 'csv', 'txt', 'zip', 'mp3', 'mp4', 'mov', 'webm'}

def extension_of(filename):
    if not filename or '.' not in filename:
        return None
    return filename.rsplit('.', 1)[1].lower()

def allowed_file(filename, allowed=FILE_EXTENSIONS):
    return extension_of(filename) in allowed

def save_file(file, allowed=FILE_EXTENSIONS):
    if not allowed_file(file.filename, allowed):
        raise ValueError("File type not allowed")

    filename = secure_filename(file.filename)
    ext = filename.rsplit('.', 1)[1].lower()
    unique_filename = f"{uuid.uuid4().hex}.{ext}"

    upload_folder = current_app.config.get('UPLOAD_FOLDER', 'uploads')
    os.makedirs(upload_folder, exist_ok=True)
    file_path = os.path.join(upload_folder, unique_filename)

    file.save(file_path)

    # Reference stored on the field (local path for dev, CDN URL in production)
    if os.path.isabs(upload_folder):
        return file_path
    return f"/{upload_folder.strip('/')}/{unique_filename}"


def delete_file(file_url):
    """
    Deletes a file given its URL or path.
    Converts URL to local path if necessary.
    """
    if not file_url:
        return False

    file_path = file_url
    if not os.path.exists(file_path):
        file_path = os.path.join(os.getcwd(), file_url.lstrip('/'))

    if os.path.exists(file_path):
        try:
            os.remove(file_path)
            return True
        except OSError as e:
            current_app.logger.error(f"Failed to delete file {file_path}: {e}")
            return False
    return False

from __future__ import annotations

import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils.translation import gettext_lazy as _

from core.exceptions import UploadRejected
from core.models import UltrasoundOrder
from core.store import get_store

logger = logging.getLogger(__name__)

ULTRASOUND_DIR = 'ultrasound'


def check_upload(f) -> str:
    """Enforce the upload policy; returns the lower-cased extension."""
    if f is None:
        raise UploadRejected(_('No file was uploaded.'))
    ext = os.path.splitext(f.name or '')[1].lower()
    if ext not in settings.ALLOWED_UPLOAD_EXTENSIONS:
        raise UploadRejected(_('Unsupported file extension.'))
    ctype = getattr(f, 'content_type', '') or ''
    if not any(ctype.startswith(prefix) for prefix in settings.ALLOWED_UPLOAD_TYPES):
        raise UploadRejected(_('Unsupported file type.'))
    if (f.size or 0) > settings.UPLOAD_MAX_MB * 1024 * 1024:
        raise UploadRejected(_('File is too large.'))
    return ext


def image_url(filename: str) -> str:
    return f"{settings.MEDIA_URL}{ULTRASOUND_DIR}/{filename}"


def attach_ultrasound_image(order: UltrasoundOrder, f) -> tuple[UltrasoundOrder, str]:
    ext = check_upload(f)
    stored = default_storage.save(f"{ULTRASOUND_DIR}/{uuid.uuid4().hex}{ext}", f)
    filename = os.path.basename(stored)
    try:
        with get_store().write():
            order = UltrasoundOrder.objects.select_for_update().get(pk=order.pk)
            order.images = ','.join(order.image_list + [filename])
            order.save(update_fields=['images', 'updated_at'])
    except Exception:
        default_storage.delete(stored)
        raise
    logger.info("stored ultrasound image %s for order %s", filename, order.pk)
    return order, filename

"""
Armazenamento de anexos via Django Storage.

Implementa o FileStorage do Core sobre `default_storage`
(FileSystemStorage por padrão; S3 ou similar trocando STORAGES).
"""

from typing import Optional
import logging

from django.core.files.base import ContentFile
from django.core.files.storage import Storage, default_storage

logger = logging.getLogger(__name__)


class DjangoFileStorage:
    """
    Example:
        storage = DjangoFileStorage()
        url = storage.save("tickets/abc/log.txt", b"...", "text/plain")
    """

    def __init__(self, storage: Optional[Storage] = None):
        self._storage = storage or default_storage

    def save(self, key: str, conteudo: bytes, content_type: str) -> str:
        """Grava o arquivo e devolve a URL pública."""
        if self._storage.exists(key):
            self._storage.delete(key)

        nome_salvo = self._storage.save(key, ContentFile(conteudo))
        if nome_salvo != key:
            logger.warning(f"Storage renomeou {key} para {nome_salvo}")

        logger.debug(f"Arquivo salvo: {nome_salvo} ({len(conteudo)} bytes, {content_type})")
        return self._storage.url(nome_salvo)

    def delete(self, key: str) -> None:
        self._storage.delete(key)
        logger.debug(f"Arquivo removido: {key}")

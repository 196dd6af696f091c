"""Dry-run publisher that writes articles to a local directory."""

import hashlib
import logging
from pathlib import Path
from typing import Dict, Optional

from articlebot.clients.interfaces import ArticlePublisher
from articlebot.core.exceptions import PublishFailed

logger = logging.getLogger(__name__)


class LocalPublisher(ArticlePublisher):
    """Writes files under an output directory using their repository paths."""

    def __init__(self, output_dir: str = "out"):
        self.output_dir = Path(output_dir)

    @property
    def target_name(self) -> str:
        return str(self.output_dir)

    async def publish(
        self, files: Dict[str, bytes], base_ref: Optional[str] = None
    ) -> str:
        digest = hashlib.sha1((base_ref or "").encode("utf-8"))
        try:
            for path, content in sorted(files.items()):
                target = self.output_dir / path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
                digest.update(path.encode("utf-8"))
                digest.update(content)
                logger.info(f"📄 Wrote {target}")
        except OSError as e:
            logger.error(f"Error writing article files: {e}")
            raise PublishFailed(f"Could not write to {self.output_dir}: {e}") from e

        return digest.hexdigest()

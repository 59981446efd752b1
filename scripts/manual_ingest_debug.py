"""One-off script for debugging download and transcoding without touching git."""

import sys
import tempfile
from pathlib import Path

from config.settings import load_config
from modules.ingest.fetcher import ImageFetcher
from modules.ingest.ingestor import ImageIngestor
from modules.utils.logging import setup_logging


def main() -> None:
    # 1. 使用真实配置，但写入临时目录
    config = load_config()
    config.log_level = "DEBUG"
    setup_logging(config)

    url = sys.argv[1] if len(sys.argv) > 1 else "https://httpbin.org/image/png"

    fetcher = ImageFetcher(
        timeout=config.fetch_timeout,
        max_redirects=config.max_redirects,
        send_browser_headers=config.send_browser_headers,
    )
    ingestor = ImageIngestor(fetcher=fetcher, quality=config.jpeg_quality, reporter=print)

    # 2. 下载并转换，不执行 git 操作
    slot_dir = Path(tempfile.mkdtemp(prefix="new-storage-debug-"))
    image_path = ingestor.ingest(url, slot_dir)

    print("图像已保存:", image_path)
    print("目录内容:", sorted(p.name for p in slot_dir.iterdir()))


if __name__ == "__main__":
    main()

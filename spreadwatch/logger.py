# spreadwatch/logger.py
import asyncio
import aiofiles
from aiocsv import AsyncWriter
import logging
import sys
import os
from typing import List, Any
from .models import OpportunityReport

REPORT_HEADER = ["timestamp", "pair", "buy_exchange", "buy_price", "sell_exchange", "sell_price", "profit"]

class OpportunityLog:
    """
    Non-blocking CSV sink for detected opportunities, one row per report.
    Disk I/O runs on a background task fed by an asyncio Queue, so the
    poll loop never waits on the filesystem.
    """
    def __init__(self, filepath: str):
        self.filepath = filepath
        self._queue: asyncio.Queue = asyncio.Queue()
        self._worker_task = None

    async def start(self):
        """
        Creates the log file with a header row if missing and starts the background writer.
        """
        directory = os.path.dirname(self.filepath)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

        if not os.path.exists(self.filepath) or os.path.getsize(self.filepath) == 0:
            async with aiofiles.open(self.filepath, mode='w', newline='') as f:
                writer = AsyncWriter(f, dialect='unix')
                await writer.writerow(REPORT_HEADER)

        self._worker_task = asyncio.create_task(self._writer_worker())

    async def log_report(self, report: OpportunityReport):
        await self.log_row(report.as_row())

    async def log_row(self, row: List[Any]):
        await self._queue.put(row)

    async def _writer_worker(self):
        while True:
            row = await self._queue.get()
            try:
                async with aiofiles.open(self.filepath, mode='a', newline='') as f:
                    writer = AsyncWriter(f, dialect='unix')
                    await writer.writerow(row)
            except Exception as e:
                # Fallback to stderr if disk I/O fails, don't stop polling
                print(f"LOGGING FAILURE: {e}", file=sys.stderr)
            finally:
                self._queue.task_done()

    async def close(self):
        """Flushes pending rows and stops the writer."""
        if self._worker_task is None:
            return
        await self._queue.join()
        self._worker_task.cancel()
        try:
            await self._worker_task
        except asyncio.CancelledError:
            pass
        self._worker_task = None

def setup_console_logger(name: str, level: str):
    """
    Sets up the standard Python logger for console output.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter('%(asctime)s | %(levelname)s | %(module)s | %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger

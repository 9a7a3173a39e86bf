"""
Comic Cover Logging System

Clean terminal output for production + detailed file logging for debugging.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Any, Dict
import json


class ComicCoverLogger:
    """
    Two-mode logging system:
    - Terminal: Clean, timestamped key events only
    - Debug file: Full detailed logs for troubleshooting

    With DEBUG_GENERATION / DEBUG_API_CALLS enabled, every poll of a
    generation job and every chat completion call is also written as
    one JSON line under settings.debug_log_dir.
    """

    def __init__(self, debug_mode: bool = False, settings=None, log_dir: str = "logs"):
        self.debug_mode = debug_mode
        self.settings = settings
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        if settings and (settings.debug_generation or settings.debug_api_calls):
            self.debug_log_dir = Path(settings.debug_log_dir)
            self.debug_log_dir.mkdir(parents=True, exist_ok=True)

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            if settings.debug_generation:
                self.generation_log = self.debug_log_dir / f"generation_{timestamp}.jsonl"
            if settings.debug_api_calls:
                self.api_calls_log = self.debug_log_dir / f"api_calls_{timestamp}.jsonl"

        if debug_mode:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = self.log_dir / f"comiccover_debug_{timestamp}.txt"

            self.file_logger = logging.getLogger("comiccover_debug")
            self.file_logger.setLevel(logging.DEBUG)

            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.file_logger.addHandler(file_handler)

            print(f"📝 Debug mode enabled. Logging to: {log_file}")

    def _timestamp(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _terminal_log(self, emoji: str, message: str, color: str = ""):
        """Print clean log to terminal"""
        colors = {
            "green": "\033[92m",
            "blue": "\033[94m",
            "yellow": "\033[93m",
            "red": "\033[91m",
            "cyan": "\033[96m",
            "reset": "\033[0m"
        }

        color_code = colors.get(color, "")
        reset = colors["reset"] if color_code else ""

        print(f"{color_code}[{self._timestamp()}] {emoji} {message}{reset}")

    def _debug_log(self, level: str, component: str, message: str, data: Optional[dict] = None):
        """Write detailed log to debug file"""
        if self.debug_mode and hasattr(self, 'file_logger'):
            log_msg = f"{component} | {message}"
            if data:
                log_msg += f" | Data: {data}"

            log_func = getattr(self.file_logger, level.lower(), self.file_logger.info)
            log_func(log_msg)

    # ===== Terminal Output Methods =====

    def job_submitted(self, job_id: str, model: str):
        """Log when a prediction is accepted by the inference service"""
        self._terminal_log("🧠", f"Prediction submitted: {job_id} ({model})", "cyan")
        self._debug_log("info", "GENERATION", "Submitted prediction", {
            "job_id": job_id,
            "model": model
        })

    def job_succeeded(self, job_id: str, attempts: int, duration: Optional[float] = None):
        """Log when a prediction produces an output"""
        msg = f"Prediction succeeded: {job_id} after {attempts} poll(s)"
        if duration:
            msg += f" in {duration:.1f}s"
        self._terminal_log("✅", msg, "green")
        self._debug_log("info", "GENERATION", "Prediction succeeded", {
            "job_id": job_id,
            "attempts": attempts,
            "duration": duration
        })

    def job_failed(self, job_id: str, status: str, attempts: int):
        """Log when a prediction ends without an output"""
        self._terminal_log("❌", f"Prediction {job_id} ended as {status} after {attempts} poll(s)", "red")
        self._debug_log("error", "GENERATION", "Prediction failed", {
            "job_id": job_id,
            "status": status,
            "attempts": attempts
        })

    def upload_completed(self, public_id: str, folder: str):
        """Log a finished object storage upload"""
        self._terminal_log("☁️", f"Uploaded {public_id} to {folder}", "green")
        self._debug_log("info", "STORAGE", "Upload completed", {
            "public_id": public_id,
            "folder": folder
        })

    def error(self, component: str, message: str, error: Exception = None):
        """Log error"""
        msg = f"Error in {component}: {message}"
        if error:
            msg += f" ({type(error).__name__})"
        self._terminal_log("⚠️", msg, "red")
        self._debug_log("error", component, message, {
            "error_type": type(error).__name__ if error else None,
            "error_message": str(error) if error else None
        })

    # ===== Debug Logging Methods =====

    def _write_json_log(self, log_file: Path, data: Dict[str, Any]):
        """Write structured JSON log entry"""
        try:
            with open(log_file, 'a') as f:
                json.dump(data, f)
                f.write('\n')
        except OSError as e:
            self.error("LOGGER", f"Failed to write JSON log to {log_file}", e)

    def _truncate_data(self, data: Any, max_length: int = 500) -> str:
        data_str = str(data)
        if len(data_str) > max_length:
            return data_str[:max_length] + f"... ({len(data_str)} chars total)"
        return data_str

    def generation_poll(self, job_id: str, attempt: int, status: str, output: Any = None):
        """Log one status check of a prediction"""
        if not self.settings or not self.settings.debug_generation:
            return

        self._terminal_log("⏳", f"Polling {job_id} attempt {attempt}, status: {status}", "blue")

        log_data = {
            "timestamp": datetime.now().isoformat(),
            "type": "generation_poll",
            "job_id": job_id,
            "attempt": attempt,
            "status": status,
            "output_preview": self._truncate_data(output, 300) if output else None
        }

        if hasattr(self, 'generation_log'):
            self._write_json_log(self.generation_log, log_data)

    def llm_api_call(self, model: str, prompt_tokens: int = 0,
                     completion_tokens: int = 0, latency: Optional[float] = None,
                     status: str = "success", purpose: str = ""):
        """Log a chat completion call with token usage"""
        if not self.settings or not self.settings.debug_api_calls:
            return

        total_tokens = prompt_tokens + completion_tokens
        latency_str = f" in {latency:.1f}s" if latency else ""
        msg = f"API openai/{model}: {total_tokens} tokens{latency_str}"
        if purpose:
            msg += f" ({purpose})"

        emoji = "🤖" if status == "success" else "⚠️"
        color = "green" if status == "success" else "yellow"
        self._terminal_log(emoji, msg, color)

        log_data = {
            "timestamp": datetime.now().isoformat(),
            "type": "llm_api_call",
            "model": model,
            "purpose": purpose,
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": total_tokens,
            "latency_seconds": latency,
            "status": status
        }

        if hasattr(self, 'api_calls_log'):
            self._write_json_log(self.api_calls_log, log_data)


def init_logger(debug_mode: bool = False, settings=None) -> ComicCoverLogger:
    """Create the application logger (DEBUG_MODE=true also turns on the debug file)"""
    if not debug_mode:
        debug_mode = os.getenv("DEBUG_MODE", "false").lower() == "true"
    return ComicCoverLogger(debug_mode=debug_mode, settings=settings)

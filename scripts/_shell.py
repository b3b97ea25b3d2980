"""诊断脚本共用的外部命令执行"""
import subprocess
from dataclasses import dataclass
from typing import Optional

from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


def run_command(command: str, description: Optional[str] = None, timeout: Optional[float] = None) -> CommandResult:
    """
    执行 shell 命令并记录输出

    命令失败不抛异常：诊断脚本需要继续执行后续检查，结果由调用方判断。
    """
    if description:
        logger.info(f"⟐ {description}")
    logger.info(f">> Running: {command}")

    try:
        completed = subprocess.run(
            command, shell=True, capture_output=True, text=True, timeout=timeout
        )
    except subprocess.TimeoutExpired as e:
        logger.error(f"Command timed out after {e.timeout}s: {command}")
        return CommandResult(command, returncode=-1, stderr=str(e))
    except OSError as e:
        logger.error(f"Error executing command: {command} | {e}")
        return CommandResult(command, returncode=-1, stderr=str(e))

    result = CommandResult(command, completed.returncode, completed.stdout or "", completed.stderr or "")
    if result.stdout.strip():
        logger.info(result.stdout.rstrip())
    if result.stderr.strip():
        logger.warning(f"STDERR: {result.stderr.rstrip()}")
    if not result.success:
        logger.error(f"Command failed ({result.returncode}): {command}")
    return result

"""Docker CLI extractor with timeout and cancellation handling."""

import logging
import shutil
import subprocess
import tempfile
import threading
import time
from pathlib import Path
from typing import IO, Iterable, List, Optional

from .archive import read_image_archive
from .config import DockerOption
from .errors import DockerError, ExtractionCancelledError, ExtractionTimeoutError
from .types import FileMap

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1


class Budget:
    """Deadline and cancellation token shared by the steps of one extraction."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        self.timeout = timeout
        self.cancel = cancel
        self.deadline = (
            time.monotonic() + timeout if timeout is not None else None
        )

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def check(self) -> None:
        """Raise if the extraction was cancelled or ran out of time."""
        if self.cancel is not None and self.cancel.is_set():
            raise ExtractionCancelledError("extraction cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise ExtractionTimeoutError(
                f"extraction timed out after {self.timeout:g} seconds"
            )


class DockerExtractor:
    """Extracts files from images through the ``docker`` command."""

    def __init__(self, option: Optional[DockerOption] = None) -> None:
        """
        Initialize Docker extractor.

        Args:
            option: Docker options; the timeout here applies when ``extract``
                is not given one explicitly
        """
        self.option = option or DockerOption()

    def _verify_docker(self) -> None:
        """Verify the Docker CLI is installed."""
        if not shutil.which(self.option.docker_binary):
            raise DockerError("Docker command not found. Please install Docker.")

    def _poll_timeout(self, budget: Budget) -> float:
        remaining = budget.remaining()
        if remaining is None:
            return POLL_INTERVAL
        return min(POLL_INTERVAL, remaining)

    def _run(self, args: List[str], budget: Budget) -> subprocess.CompletedProcess:
        """
        Run a docker command, killing it on cancellation or timeout.

        Args:
            args: Arguments after the docker binary
            budget: Deadline and cancellation token

        Returns:
            Completed process with captured output

        Raises:
            DockerError: If the command exits non-zero
        """
        cmd = [self.option.docker_binary, *args]
        logger.debug("Running %s", " ".join(cmd))
        proc = subprocess.Popen(
            cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True
        )
        try:
            while True:
                try:
                    stdout, stderr = proc.communicate(
                        timeout=self._poll_timeout(budget)
                    )
                    break
                except subprocess.TimeoutExpired:
                    budget.check()
        except BaseException:
            proc.kill()
            proc.wait()
            raise

        if proc.returncode != 0:
            raise DockerError(f"{' '.join(cmd)} failed: {stderr.strip()}")
        return subprocess.CompletedProcess(cmd, proc.returncode, stdout, stderr)

    def _image_exists(self, image: str, budget: Budget) -> bool:
        try:
            self._run(["image", "inspect", image], budget)
            return True
        except DockerError:
            return False

    def pull_image(self, image: str, budget: Budget) -> None:
        """Pull an image, honouring the configured platform."""
        args = ["pull"]
        if self.option.platform:
            args += ["--platform", self.option.platform]
        logger.info(f"Pulling {image}")
        self._run([*args, image], budget)

    def extract(
        self,
        image_name: str,
        filenames: Iterable[str],
        *,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> FileMap:
        """
        Save an image with ``docker save`` and read the required files.

        Args:
            image_name: Image reference, e.g. "alpine:3.19"
            filenames: Paths or base names to extract
            timeout: Time budget in seconds (falls back to the option's)
            cancel: Event that aborts the extraction once set

        Returns:
            File map of the requested files present in the image
        """
        budget = Budget(timeout if timeout is not None else self.option.timeout, cancel)
        self._verify_docker()

        if not self._image_exists(image_name, budget):
            self.pull_image(image_name, budget)

        with tempfile.TemporaryDirectory(prefix="image-inventory-") as temp_dir:
            archive_path = Path(temp_dir) / "image.tar"
            self._run(["save", "-o", str(archive_path), image_name], budget)
            budget.check()

            with archive_path.open("rb") as f:
                file_map = read_image_archive(f, filenames, budget.check)

        logger.info(f"Extracted {len(file_map)} files from {image_name}")
        return file_map

    def extract_from_file(
        self,
        stream: IO[bytes],
        filenames: Iterable[str],
        *,
        cancel: Optional[threading.Event] = None,
    ) -> FileMap:
        """
        Read the required files from an exported image archive.

        The stream is closed whether or not extraction succeeds.

        Args:
            stream: Readable ``docker save`` archive
            filenames: Paths or base names to extract
            cancel: Event that aborts the extraction once set

        Returns:
            File map of the requested files present in the archive
        """
        budget = Budget(cancel=cancel)
        try:
            budget.check()
            return read_image_archive(stream, filenames, budget.check)
        finally:
            stream.close()

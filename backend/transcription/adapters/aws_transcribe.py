"""
Amazon Transcribe Provider

Stages audio in S3, starts a batch Amazon Transcribe job writing its
output to the same bucket, polls the job and reads the transcript JSON
back from S3. boto3 calls are blocking and run in the default executor.
"""

import asyncio
import json
import logging
import uuid
from functools import partial
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import BackendError
from ..models import ProgressPhase, RawTranscription, TranscriptionSegment
from .base import TranscriptionRequest
from .polling import PollingPolicy, PollStatus, poll_until_done
from .speech_api import SpeechProvider, processing_reporter

logger = logging.getLogger(__name__)

# File extension -> Amazon Transcribe MediaFormat
MEDIA_FORMATS = {
    ".wav": "wav",
    ".mp3": "mp3",
    ".mp4": "mp4",
    ".m4a": "m4a",
    ".flac": "flac",
    ".ogg": "ogg",
    ".webm": "webm",
    ".amr": "amr",
}


class AWSTranscribeProvider(SpeechProvider):
    """
    Amazon Transcribe through boto3.

    Uses the standard AWS credential chain instead of a stored API key.
    """

    name = "aws"
    DEFAULT_PREFIX = "minutes-transcribe/"

    def __init__(
        self,
        bucket_name: str,
        polling: PollingPolicy,
        region: str = "us-west-2",
        prefix: str = DEFAULT_PREFIX,
        language_code: Optional[str] = None,
        s3_client=None,
        transcribe_client=None,
        sleep=None,
    ):
        """
        Initialize the provider.

        Args:
            bucket_name: S3 bucket for staged audio and job output
            polling: Interval and attempt ceiling for job status checks
            region: AWS region (default: us-west-2)
            prefix: Key prefix for staged objects
            language_code: Fixed language; language identification if None
            s3_client: Preconfigured S3 client
            transcribe_client: Preconfigured Transcribe client
            sleep: Awaitable sleep override for polling
        """
        self.bucket_name = bucket_name
        self.polling = polling
        self.region = region
        self.prefix = prefix
        self.language_code = language_code
        self.s3_client = s3_client or boto3.client("s3", region_name=region)
        self.transcribe_client = transcribe_client or boto3.client(
            "transcribe", region_name=region
        )
        self._sleep = sleep

        logger.debug(f"AWSTranscribeProvider initialized: bucket={bucket_name}, region={region}")

    async def _call(self, func, **kwargs) -> Any:
        """Run a blocking boto3 call in the executor, wrapping AWS errors."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(func, **kwargs))
        except ClientError as e:
            error = e.response.get("Error", {})
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            logger.error(f"AWS call failed: {error.get('Code')}: {error.get('Message')}")
            raise BackendError(
                self.name,
                error.get("Code", "ClientError"),
                status=status,
                body=error.get("Message"),
            ) from e
        except BotoCoreError as e:
            logger.error(f"AWS call failed: {e}")
            raise BackendError(self.name, str(e)) from e

    def media_format(self, filename: str) -> str:
        suffix = filename[filename.rfind("."):].lower() if "." in filename else ""
        return MEDIA_FORMATS.get(suffix, "wav")

    async def transcribe(self, request: TranscriptionRequest) -> RawTranscription:
        job_name = f"minutes-{uuid.uuid4().hex}"
        media_key = f"{self.prefix}{job_name}/{request.audio.filename}"
        output_key = f"{self.prefix}{job_name}/transcript.json"

        request.report(ProgressPhase.UPLOADING, 10, "Uploading audio to S3...")
        await self._call(
            self.s3_client.put_object,
            Bucket=self.bucket_name,
            Key=media_key,
            Body=request.audio.read_bytes(),
            ContentType=request.audio.mime_type,
        )

        job_params: Dict[str, Any] = {
            "TranscriptionJobName": job_name,
            "Media": {"MediaFileUri": f"s3://{self.bucket_name}/{media_key}"},
            "MediaFormat": self.media_format(request.audio.filename),
            "OutputBucketName": self.bucket_name,
            "OutputKey": output_key,
        }
        if self.language_code:
            job_params["LanguageCode"] = self.language_code
        else:
            job_params["IdentifyLanguage"] = True

        request.report(ProgressPhase.UPLOADING, 30, "Starting transcription job...")
        await self._call(self.transcribe_client.start_transcription_job, **job_params)
        logger.info(f"Amazon Transcribe job {job_name} started")

        async def check() -> PollStatus:
            response = await self._call(
                self.transcribe_client.get_transcription_job,
                TranscriptionJobName=job_name,
            )
            job = response.get("TranscriptionJob", {})
            status = job.get("TranscriptionJobStatus")
            if status == "COMPLETED":
                return PollStatus.done(job)
            if status == "FAILED":
                return PollStatus.failed(job.get("FailureReason") or "unknown reason")
            return PollStatus.pending(f"Amazon Transcribe job {status}...")

        job = await poll_until_done(
            self.name,
            check,
            self.polling,
            on_progress=processing_reporter(request),
            sleep=self._sleep,
        )

        obj = await self._call(self.s3_client.get_object, Bucket=self.bucket_name, Key=output_key)
        try:
            document = json.loads(obj["Body"].read())
            results = document["results"]
            text = results["transcripts"][0]["transcript"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise BackendError(self.name, "Transcript output is malformed") from e

        return RawTranscription(
            text=str(text).strip(),
            segments=self._segments(results.get("audio_segments")),
            language=job.get("LanguageCode"),
            provider=self.name,
        )

    def _segments(self, items: Optional[List[Dict[str, Any]]]) -> Optional[List[TranscriptionSegment]]:
        if not items:
            return None
        try:
            segments = [
                TranscriptionSegment(
                    text=str(item.get("transcript", "")).strip(),
                    start_time=float(item["start_time"]),
                    end_time=float(item["end_time"]),
                )
                for item in items
                if item.get("start_time") is not None and item.get("end_time") is not None
            ]
        except (AttributeError, TypeError, ValueError) as e:
            raise BackendError(self.name, "Malformed segment timestamps", body=str(e)) from e
        return segments or None

import logging
import mimetypes
import uuid
from datetime import datetime
from typing import Optional

import boto3
from botocore.exceptions import ClientError
from fastapi import UploadFile

from errors import BlogError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class S3Service:
    def __init__(self, bucket_name: str, client: boto3.client, max_size_mb: int = 5):
        """
        Initialize the S3 service with bucket name and client
        """
        self.bucket_name = bucket_name
        self.s3 = client
        self.max_size_mb = max_size_mb

    async def upload_image(self, file: UploadFile, user_id: str, max_size_mb: Optional[int] = None) -> str:
        """
        Upload a post image to S3 with user ownership metadata

        Args:
            file: The image to upload
            user_id: The ID of the user uploading the image
            max_size_mb: Maximum file size in MB, defaults to the service limit

        Returns:
            The unique S3 key for the uploaded image

        Raises:
            ValidationError: If the file is not an image or is too large
            BlogError: If the upload itself fails
        """
        max_size_mb = max_size_mb or self.max_size_mb
        content_type = file.content_type or ""
        if not content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed")

        extension = mimetypes.guess_extension(content_type) or ""
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        unique_filename = f"posts/{user_id}/{timestamp}-{uuid.uuid4()}{extension}"

        file_content = await file.read()
        if not file_content:
            raise ValidationError("Uploaded file is empty")
        if len(file_content) > max_size_mb * 1024 * 1024:
            raise ValidationError(f"File size exceeds {max_size_mb}MB limit")

        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=unique_filename,
                Body=file_content,
                ContentType=content_type,
                Metadata={
                    'user_id': user_id
                }
            )
        except ClientError as e:
            logger.error(f"S3 upload error: {e}")
            raise BlogError("Failed to upload image")

        return unique_filename

    def get_presigned_url(self, key: str, expiration_seconds: int = 3600) -> str:
        """
        Generate a presigned URL for accessing an image

        Args:
            key: The S3 key of the image
            expiration_seconds: URL expiration time in seconds

        Returns:
            Presigned URL for the image
        """
        try:
            return self.s3.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key
                },
                ExpiresIn=expiration_seconds
            )
        except ClientError as e:
            logger.error(f"S3 error details: {str(e)}")
            raise NotFoundError("File not found or access denied")

"""
S3 storage service for training-provider licence PDFs.
Provides upload, listing and presigned URL generation.
"""

import json
import logging
import re
from typing import Optional

from faib_tools.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Lazy import boto3
boto3 = None

LICENCE_PREFIX = "licences/"
YEAR_FOLDER = re.compile(r"^\d{4}$")


def get_boto3():
    """Lazily import boto3."""
    global boto3
    if boto3 is None:
        import boto3 as _boto3
        boto3 = _boto3
    return boto3


def is_licence_path(path: str) -> bool:
    """Check that a key lies inside the licences/ prefix."""
    return bool(path) and path.startswith(LICENCE_PREFIX) and ".." not in path


def licence_filename(licence_number: str, company_name: str) -> str:
    """Build a safe PDF filename such as "FAIB-1234_Acme_First_Aid_Ltd.pdf"."""
    safe_company = re.sub(r"[^A-Za-z0-9]+", "_", company_name).strip("_")
    safe_licence = re.sub(r"[^A-Za-z0-9-]+", "-", licence_number).strip("-")
    return f"{safe_licence}_{safe_company}.pdf"


class StorageService:
    """
    S3-based storage for generated licences.

    Storage structure:
    s3://{bucket}/
        licences/{year}/
            {licence_number}_{company}.pdf    # Licence certificate
            {licence_number}_{company}.json   # Certificate data sidecar
    """

    def __init__(self, settings: Optional[Settings] = None, client=None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self):
        """Get or create S3 client."""
        if self._client is None:
            boto = get_boto3()

            client_kwargs = {}
            if self.settings.aws_endpoint_url:
                client_kwargs["endpoint_url"] = self.settings.aws_endpoint_url
            if self.settings.aws_access_key_id:
                client_kwargs["aws_access_key_id"] = self.settings.aws_access_key_id
                client_kwargs["aws_secret_access_key"] = self.settings.aws_secret_access_key
            if self.settings.aws_region:
                client_kwargs["region_name"] = self.settings.aws_region

            self._client = boto.client("s3", **client_kwargs)
        return self._client

    @property
    def bucket(self) -> str:
        """Get the S3 bucket name."""
        if not self.settings.s3_bucket:
            raise ValueError("S3_BUCKET not configured")
        return self.settings.s3_bucket

    def is_configured(self) -> bool:
        """Check if S3 storage is configured."""
        return bool(self.settings.s3_bucket)

    def upload_licence(
        self,
        year: int,
        filename: str,
        content: bytes,
        certificate_data: Optional[dict] = None,
    ) -> dict:
        """
        Upload a licence PDF (and optional certificate data sidecar).

        Returns:
            dict with S3 keys for stored objects
        """
        key = f"{LICENCE_PREFIX}{year}/{filename}"
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=content,
            ContentType="application/pdf",
        )
        result = {"path": key, "size_bytes": len(content)}

        if certificate_data:
            meta_key = re.sub(r"\.pdf$", "", key, flags=re.IGNORECASE) + ".json"
            self.client.put_object(
                Bucket=self.bucket,
                Key=meta_key,
                Body=json.dumps(certificate_data, default=str, indent=2).encode("utf-8"),
                ContentType="application/json",
            )
            result["metadata_path"] = meta_key

        logger.info("Uploaded licence %s", key)
        return result

    def _list_all_licences(self) -> list[dict]:
        files = []
        paginator = self.client.get_paginator("list_objects_v2")

        for page in paginator.paginate(Bucket=self.bucket, Prefix=LICENCE_PREFIX):
            for obj in page.get("Contents", []):
                key = obj["Key"]
                relative = key[len(LICENCE_PREFIX):]
                parts = relative.split("/")

                # Only licences/{file}.pdf or licences/{year}/{file}.pdf
                if len(parts) > 2 or (len(parts) == 2 and not YEAR_FOLDER.match(parts[0])):
                    continue
                if key.lower().endswith(".json") or key.endswith("/"):
                    continue
                if not key.lower().endswith(".pdf"):
                    logger.warning("Licence object without .pdf extension: %s", key)

                files.append({
                    "name": parts[-1],
                    "path": key,
                    "size_bytes": obj.get("Size", 0),
                    "last_modified": obj.get("LastModified"),
                })

        # Newest first
        files.sort(key=lambda f: (f["last_modified"] is not None, f["last_modified"] or 0), reverse=True)
        return files

    def list_licences(self, page: int = 1, limit: int = 20) -> dict:
        """
        List licence PDFs, newest first, with pagination.

        Raises:
            ValueError: if page < 1 or limit is outside 1-100
        """
        if page < 1 or limit < 1 or limit > 100:
            raise ValueError("Invalid pagination parameters (page >= 1, limit 1-100)")

        files = self._list_all_licences()
        offset = (page - 1) * limit
        total = len(files)

        return {
            "files": files[offset:offset + limit],
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": (total + limit - 1) // limit,
        }

    def get_licence_url(self, path: str, expires_in: Optional[int] = None) -> str:
        """
        Get a short-lived presigned URL for a licence.

        Raises:
            ValueError: if the path is outside the licences/ prefix
        """
        if not is_licence_path(path):
            raise ValueError(f'Invalid path: must start with "{LICENCE_PREFIX}"')

        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": path},
            ExpiresIn=expires_in or self.settings.licence_url_expiry_seconds,
        )


# Convenience functions
_storage_service = None


def get_storage_service() -> StorageService:
    """Get the global storage service instance."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service

"""
Tests for the S3 client

These tests verify that:
1. The boto3 client is built with the credentials, region and endpoint
2. Listing goes through the list_objects_v2 paginator
3. Uploads and downloads go through the transfer manager without threads
4. boto3 errors are wrapped in s3ferry exceptions
"""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from s3ferry.config import Settings
from s3ferry.exceptions import DeleteError, EnumerationError, TransferError
from s3ferry.vault import Credential

CREDENTIAL = Credential("AKIA123", "secret", "session")


def client_error(operation):
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, operation)


class TestAwsS3ClientInstantiation:
    """Tests for AwsS3Client instantiation"""

    @patch("s3ferry.s3client.boto3")
    def test_default_endpoint(self, mock_boto3):
        """Test the client signs with the credentials and region"""
        from s3ferry.s3client import AwsS3Client

        client = AwsS3Client(CREDENTIAL, region="us-east-1")

        assert client.client == mock_boto3.client.return_value
        _, kwargs = mock_boto3.client.call_args
        assert kwargs["aws_access_key_id"] == "AKIA123"
        assert kwargs["aws_secret_access_key"] == "secret"
        assert kwargs["aws_session_token"] == "session"
        assert kwargs["region_name"] == "us-east-1"
        assert kwargs["endpoint_url"] is None
        config = kwargs["config"]
        assert config.connect_timeout == 30
        assert config.read_timeout == 90

    @patch("s3ferry.s3client.boto3")
    def test_custom_endpoint_uses_path_style(self, mock_boto3):
        """Test a custom endpoint switches to path-style addressing"""
        from s3ferry.s3client import AwsS3Client

        AwsS3Client(CREDENTIAL, region="sa-east-1", endpoint="https://minio.local:9000")

        _, kwargs = mock_boto3.client.call_args
        assert kwargs["endpoint_url"] == "https://minio.local:9000"
        assert kwargs["config"].s3 == {"addressing_style": "path"}

    @patch("s3ferry.s3client.boto3")
    def test_empty_session_token(self, mock_boto3):
        """Test an empty session token is not sent"""
        from s3ferry.s3client import AwsS3Client

        AwsS3Client(Credential("AKIA123", "secret"))

        _, kwargs = mock_boto3.client.call_args
        assert kwargs["aws_session_token"] is None

    @patch("s3ferry.s3client.boto3")
    def test_factory(self, mock_boto3):
        """Test the factory reads region and endpoint from the settings"""
        from s3ferry.s3client import AwsS3Client, s3_client_factory

        settings = Settings(region="eu-west-1", endpoint="https://s3.example.com")
        client = s3_client_factory(settings, CREDENTIAL)

        assert isinstance(client, AwsS3Client)
        _, kwargs = mock_boto3.client.call_args
        assert kwargs["region_name"] == "eu-west-1"
        assert kwargs["endpoint_url"] == "https://s3.example.com"


class TestListObjects:
    """Tests for list_objects"""

    @patch("s3ferry.s3client.boto3")
    def test_pagination(self, mock_boto3):
        """Test 2,500 keys in pages of 1000 come back from three pages"""
        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_boto3.client.return_value = mock_client
        keys = [f"data/{n:05d}.csv" for n in range(2500)]
        pages = [
            {"Contents": [{"Key": k} for k in keys[:1000]]},
            {"Contents": [{"Key": k} for k in keys[1000:2000]]},
            {"Contents": [{"Key": k} for k in keys[2000:]]},
        ]
        mock_paginator = MagicMock()
        mock_paginator.paginate.return_value = iter(pages)
        mock_client.get_paginator.return_value = mock_paginator

        client = AwsS3Client(CREDENTIAL)
        with patch.object(client.loggit, "debug") as mock_debug:
            result = client.list_objects("bucket", prefix="data/", page_size=1000)

        assert result == keys
        mock_client.get_paginator.assert_called_once_with("list_objects_v2")
        mock_paginator.paginate.assert_called_once_with(
            Bucket="bucket", Prefix="data/", PaginationConfig={"PageSize": 1000}
        )
        page_logs = [c for c in mock_debug.call_args_list if c.args[0].startswith("Page")]
        assert len(page_logs) == 3

    @patch("s3ferry.s3client.boto3")
    def test_empty_bucket(self, mock_boto3):
        """Test an empty listing returns no keys"""
        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_boto3.client.return_value = mock_client
        mock_client.get_paginator.return_value.paginate.return_value = iter([{"KeyCount": 0}])

        assert AwsS3Client(CREDENTIAL).list_objects("bucket") == []

    @patch("s3ferry.s3client.boto3")
    def test_error(self, mock_boto3):
        """Test a listing failure raises EnumerationError"""
        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_boto3.client.return_value = mock_client
        mock_client.get_paginator.return_value.paginate.side_effect = client_error(
            "ListObjectsV2"
        )

        with pytest.raises(EnumerationError):
            AwsS3Client(CREDENTIAL).list_objects("bucket")


class TestObjectOperations:
    """Tests for put, get and delete"""

    @patch("s3ferry.s3client.boto3")
    def test_put_object(self, mock_boto3, tmp_path):
        """Test an upload streams the file with metadata and part size"""
        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_client.meta.endpoint_url = "https://s3.sa-east-1.amazonaws.com"
        mock_boto3.client.return_value = mock_client
        path = tmp_path / "report.csv"
        path.write_text("a,b\n")

        client = AwsS3Client(CREDENTIAL)
        location = client.put_object(
            "bucket", "in/report.csv", str(path), metadata={"owner": "ops"}, part_size=64 * 1024 * 1024
        )

        assert location == "https://s3.sa-east-1.amazonaws.com/bucket/in/report.csv"
        args, kwargs = mock_client.upload_fileobj.call_args
        assert args[1:] == ("bucket", "in/report.csv")
        assert kwargs["ExtraArgs"] == {"Metadata": {"owner": "ops"}}
        config = kwargs["Config"]
        assert config.use_threads is False
        assert config.multipart_chunksize == 64 * 1024 * 1024

    @patch("s3ferry.s3client.boto3")
    def test_put_object_without_metadata(self, mock_boto3, tmp_path):
        """Test no extra arguments are sent without metadata"""
        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_client.meta.endpoint_url = "https://s3.amazonaws.com/"
        mock_boto3.client.return_value = mock_client
        path = tmp_path / "a.bin"
        path.write_bytes(b"\x00")

        AwsS3Client(CREDENTIAL).put_object("bucket", "a.bin", str(path))

        _, kwargs = mock_client.upload_fileobj.call_args
        assert kwargs["ExtraArgs"] is None

    @patch("s3ferry.s3client.boto3")
    def test_put_object_missing_file(self, mock_boto3, tmp_path):
        """Test a file that cannot be opened raises TransferError"""
        from s3ferry.s3client import AwsS3Client

        with pytest.raises(TransferError, match="Unable to open"):
            AwsS3Client(CREDENTIAL).put_object("bucket", "k", str(tmp_path / "missing"))

    @patch("s3ferry.s3client.boto3")
    def test_put_object_error(self, mock_boto3, tmp_path):
        """Test an upload failure raises TransferError"""
        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_client.upload_fileobj.side_effect = client_error("PutObject")
        mock_boto3.client.return_value = mock_client
        path = tmp_path / "a.bin"
        path.write_bytes(b"\x00")

        with pytest.raises(TransferError):
            AwsS3Client(CREDENTIAL).put_object("bucket", "a.bin", str(path))

    @patch("s3ferry.s3client.boto3")
    def test_get_object(self, mock_boto3, tmp_path):
        """Test a download writes the file and returns its size"""
        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_client.download_fileobj.side_effect = (
            lambda bucket, key, target, Config: target.write(b"hello")
        )
        mock_boto3.client.return_value = mock_client
        path = tmp_path / "hello.txt"

        size = AwsS3Client(CREDENTIAL).get_object("bucket", "in/hello.txt", str(path))

        assert size == 5
        assert path.read_bytes() == b"hello"
        _, kwargs = mock_client.download_fileobj.call_args
        assert kwargs["Config"].use_threads is False
        assert kwargs["Config"].multipart_chunksize == 64 * 1024 * 1024

    @patch("s3ferry.s3client.boto3")
    def test_get_object_error(self, mock_boto3, tmp_path):
        """Test a download failure raises TransferError"""
        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_client.download_fileobj.side_effect = client_error("GetObject")
        mock_boto3.client.return_value = mock_client

        with pytest.raises(TransferError, match="in/x"):
            AwsS3Client(CREDENTIAL).get_object("bucket", "in/x", str(tmp_path / "x"))

    @patch("s3ferry.s3client.boto3")
    def test_get_object_stream_failure(self, mock_boto3, tmp_path):
        """Test a broken download stream raises TransferError after one attempt"""
        from s3transfer.exceptions import RetriesExceededError

        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_client.download_fileobj.side_effect = RetriesExceededError(
            ConnectionResetError("reset by peer")
        )
        mock_boto3.client.return_value = mock_client

        with pytest.raises(TransferError, match="in/x"):
            AwsS3Client(CREDENTIAL).get_object("bucket", "in/x", str(tmp_path / "x"))
        _, kwargs = mock_client.download_fileobj.call_args
        assert kwargs["Config"].num_download_attempts == 1

    @patch("s3ferry.s3client.boto3")
    def test_get_object_bad_folder(self, mock_boto3, tmp_path):
        """Test a destination that cannot be created raises TransferError"""
        from s3ferry.s3client import AwsS3Client

        with pytest.raises(TransferError, match="Unable to create"):
            AwsS3Client(CREDENTIAL).get_object("bucket", "x", str(tmp_path / "no" / "x"))

    @patch("s3ferry.s3client.boto3")
    def test_delete_object(self, mock_boto3):
        """Test delete calls the API and wraps failures"""
        from s3ferry.s3client import AwsS3Client

        mock_client = MagicMock()
        mock_boto3.client.return_value = mock_client
        client = AwsS3Client(CREDENTIAL)

        client.delete_object("bucket", "old.csv")
        mock_client.delete_object.assert_called_once_with(Bucket="bucket", Key="old.csv")

        mock_client.delete_object.side_effect = client_error("DeleteObject")
        with pytest.raises(DeleteError):
            client.delete_object("bucket", "old.csv")

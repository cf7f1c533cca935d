"""Tests for command option validation"""

import pytest

from s3ferry.exceptions import ConfigurationError
from s3ferry.validators import ACTION_SCHEMAS, get_schema, validate_options


class TestSchemas:
    """Tests for the schema registry"""

    def test_every_command_has_a_schema(self):
        assert set(ACTION_SCHEMAS) == {
            'get', 'put', 'config_s3', 'config_vault', 'config_local', 'logging'
        }

    def test_unknown_command(self):
        with pytest.raises(KeyError):
            get_schema('sync')


class TestTransferOptions:
    """Tests for get and put options"""

    def test_defaults(self):
        """Test defaults are applied to missing options"""
        result = validate_options('get', {'filter': '*.csv', 'bucket': 'backups'})
        assert result['prefix'] == ''
        assert result['rename'] == ''
        assert result['part_size'] == 0
        assert result['remove'] is False
        assert result['error_no_files'] is False
        assert result['porcelain'] is False
        assert result['role'] is None

    def test_prefix_is_normalized(self):
        result = validate_options(
            'put', {'filter': '*', 'bucket': 'b', 'prefix': '/daily'}
        )
        assert result['prefix'] == 'daily/'

    def test_filter_required(self):
        with pytest.raises(ConfigurationError):
            validate_options('get', {'bucket': 'backups'})
        with pytest.raises(ConfigurationError):
            validate_options('get', {'filter': '', 'bucket': 'backups'})

    def test_bucket_required(self):
        with pytest.raises(ConfigurationError, match='bucket'):
            validate_options('get', {'filter': '*', 'bucket': ''})

    def test_metadata_only_on_put(self):
        validate_options('put', {'filter': '*', 'bucket': 'b', 'metadata': 'a=1'})
        with pytest.raises(ConfigurationError):
            validate_options('get', {'filter': '*', 'bucket': 'b', 'metadata': 'a=1'})

    def test_negative_part_size(self):
        with pytest.raises(ConfigurationError):
            validate_options('put', {'filter': '*', 'bucket': 'b', 'part_size': -1})

    def test_boolean_strings(self):
        result = validate_options(
            'get', {'filter': '*', 'bucket': 'b', 'remove': 'yes', 'porcelain': 'false'}
        )
        assert result['remove'] is True
        assert result['porcelain'] is False


class TestConfigOptions:
    """Tests for the config command options"""

    def test_auth_method_is_lowercased(self):
        result = validate_options('config_vault', {'auth_method': 'AppRole'})
        assert result['auth_method'] == 'approle'

    def test_unknown_auth_method(self):
        with pytest.raises(ConfigurationError):
            validate_options('config_vault', {'auth_method': 'ldap'})

    def test_engine_version(self):
        for version in ('1', '2', 'auto'):
            assert validate_options('config_vault', {'engine_version': version})[
                'engine_version'
            ] == version
        with pytest.raises(ConfigurationError):
            validate_options('config_vault', {'engine_version': '3'})

    def test_config_s3(self):
        result = validate_options('config_s3', {'bucket': 'b', 'part_size': '8388608'})
        assert result['bucket'] == 'b'
        assert result['part_size'] == 8388608
        assert result['access_key'] is None


class TestLoggingOptions:
    """Tests for the logging options"""

    def test_defaults(self):
        result = validate_options('logging', {})
        assert result['loglevel'] == 'INFO'
        assert result['logfile'] is None
        assert result['logformat'] == 'default'
        assert 'botocore' in result['blacklist']

    def test_bad_format(self):
        with pytest.raises(ConfigurationError):
            validate_options('logging', {'logformat': 'xml'})

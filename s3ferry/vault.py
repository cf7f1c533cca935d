"""
vault.py

Credential broker for s3ferry. Authenticates against a vault server with a static
token, an app-role or a client certificate, then exchanges a role for short-lived
S3 credentials from the AWS secrets engine.
"""

# pylint: disable=too-many-arguments

import json
import logging
import ssl
from dataclasses import dataclass

import requests
from voluptuous import ALLOW_EXTRA, Any, Invalid, Required, Schema

from s3ferry.constants import (
    STS_ACCESS_KEY,
    STS_SECRET_KEY,
    STS_SESSION_TOKEN,
    VAULT_API_VERSION,
    VAULT_AUTH_APPROLE,
    VAULT_AUTH_CERT,
    VAULT_AUTH_TOKEN,
    VAULT_DEFAULT_APPROLE_PATH,
    VAULT_DEFAULT_CERT_PATH,
    VAULT_DEFAULT_ENGINE_PATH,
    VAULT_ENGINE_VERSION_AUTO,
    VAULT_ENGINE_VERSIONS,
    VAULT_SECRET_TTL,
    VAULT_STS_SUFFIX,
    VAULT_TIMEOUT,
)
from s3ferry.exceptions import AuthError, ConfigurationError

# Expected response shapes. Anything else is reported as an AuthError.
AUTH_RESPONSE = Schema(
    {
        Required("auth"): Schema(
            {Required("client_token"): str}, extra=ALLOW_EXTRA
        )
    },
    extra=ALLOW_EXTRA,
)
SECRET_V1_RESPONSE = Schema({Required("data"): dict}, extra=ALLOW_EXTRA)
SECRET_V2_RESPONSE = Schema(
    {Required("data"): Schema({Required("data"): dict}, extra=ALLOW_EXTRA)},
    extra=ALLOW_EXTRA,
)
TUNE_RESPONSE = Schema(
    {
        Required("options"): Schema(
            {Required("version"): Any(str, int)}, extra=ALLOW_EXTRA
        )
    },
    extra=ALLOW_EXTRA,
)


@dataclass
class Credential:
    """
    Temporary S3 credentials. Built once at process start, either from static
    configuration or from the vault, and never refreshed.
    """

    access_key: str
    secret_key: str
    session_token: str = ""


def stringify(value):
    """Render a secret value the way it was written in the JSON payload"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def decode_secret(data, version):
    """
    Extract the secret bundle from a secrets engine response.

    :param data: The decoded JSON response
    :param version: The secrets engine version, ``"1"`` or ``"2"``

    :type data: dict
    :type version: str

    :returns: Every field of the secret, stringified. ``null`` becomes ``""``
    :rtype: dict
    """
    try:
        if version == "2":
            payload = SECRET_V2_RESPONSE(data)["data"]["data"]
        else:
            payload = SECRET_V1_RESPONSE(data)["data"]
    except Invalid as err:
        raise AuthError(f"Unexpected secret payload from vault: {err}") from err
    return {key: stringify(value) for key, value in payload.items()}


def normalize_engine_path(engine_path):
    """Strip slashes from the configured engine path, defaulting to ``aws``"""
    engine_path = (engine_path or "").strip("/")
    return engine_path or VAULT_DEFAULT_ENGINE_PATH


def sts_mount(engine_path):
    """Return the mount used for role-based STS lookups"""
    return f"{normalize_engine_path(engine_path)}/{VAULT_STS_SUFFIX}"


class Vault:
    """
    A vault session: base address, bearer token and HTTP transport.

    The token is set once by one of the ``auth_by_*`` methods (or passed in for
    token authentication) and only read afterwards.

    :param address: Vault base URL, e.g. ``https://vault.example.com:8200``
    :param token: Static token, used by token authentication
    :param ssl_no_validate: Do not verify the server certificate
    :param session: An existing :py:class:`requests.Session` to use

    :type address: str
    :type token: str
    :type ssl_no_validate: bool
    :type session: :py:class:`requests.Session`
    """

    def __init__(self, address, token="", ssl_no_validate=False, session=None):
        self.loggit = logging.getLogger("s3ferry.vault")
        self.address = (address or "").rstrip("/")
        self.token = token or ""
        self.session = session if session is not None else requests.Session()
        if ssl_no_validate:
            self.loggit.warning("Vault server certificate will not be verified")
            self.session.verify = False

    def url(self, path):
        """Build the API URL for ``path``"""
        return f"{self.address}/{VAULT_API_VERSION}/{path.strip('/')}"

    def close(self):
        """Release the HTTP transport"""
        self.session.close()

    def _token_headers(self, namespace=""):
        headers = {"X-Vault-Token": self.token}
        if namespace:
            headers["X-Vault-Namespace"] = namespace
        return headers

    def _request(self, method, path, include_body=False, **kwargs):
        """
        Send one request and decode the JSON answer.

        :param method: HTTP method
        :param path: API path, relative to ``/v1``
        :param include_body: Append the response body to the error message on a
            non-200 answer

        :rtype: dict
        """
        url = self.url(path)
        self.loggit.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method, url, timeout=VAULT_TIMEOUT, **kwargs
            )
        except requests.RequestException as err:
            raise AuthError(f"Unable to execute http request to {url}: {err}") from err
        try:
            if response.status_code != 200:
                message = (
                    f"Invalid response received from {url}: "
                    f"{response.status_code} {response.reason}"
                )
                if include_body and response.text:
                    message = f"{message}, {response.text}"
                raise AuthError(message)
            try:
                return response.json()
            except ValueError as err:
                raise AuthError(f"Failed to decode vault response from {url}: {err}") from err
        finally:
            response.close()

    def _store_token(self, data):
        try:
            self.token = AUTH_RESPONSE(data)["auth"]["client_token"]
        except Invalid as err:
            raise AuthError(f"Unexpected authentication response from vault: {err}") from err
        self.loggit.debug("Vault authentication succeeded")
        return self

    def authenticate(self, method, **params):
        """
        Authenticate with ``method`` (``token``, ``approle`` or ``cert``).

        An empty method means ``token``. ``params`` are passed on to the matching
        ``auth_by_*`` method.

        :returns: This session, holding a token
        :rtype: :py:class:`Vault`
        """
        method = (method or VAULT_AUTH_TOKEN).lower()
        handlers = {
            VAULT_AUTH_TOKEN: self.auth_by_token,
            VAULT_AUTH_APPROLE: self.auth_by_approle,
            VAULT_AUTH_CERT: self.auth_by_certificate,
        }
        if method not in handlers:
            raise ConfigurationError(
                f"Vault authentication method {method} is not supported"
            )
        self.loggit.info("Authenticating to vault %s using %s", self.address, method)
        return handlers[method](**params)

    def auth_by_token(self, token=None):
        """Use a static token. No request is sent."""
        token = token or self.token
        if not token:
            raise ConfigurationError("Vault token not provided")
        self.token = token
        return self

    def auth_by_approle(self, role_id=None, secret_id=None, path=None):
        """
        Log in with an app-role.

        :param role_id: The role identifier
        :param secret_id: The secret identifier
        :param path: Login path, defaults to ``auth/approle/login``
        """
        if not role_id:
            raise ConfigurationError("Vault authentication role id not provided")
        if not secret_id:
            raise ConfigurationError("Vault authentication secret id not provided")
        data = self._request(
            "POST",
            path or VAULT_DEFAULT_APPROLE_PATH,
            json={"role_id": role_id, "secret_id": secret_id},
        )
        return self._store_token(data)

    def auth_by_certificate(
        self, cert=None, cert_key=None, ca_cert=None, cert_role="", path=None
    ):
        """
        Log in with a client certificate (mutual TLS).

        The certificate, its key and the CA bundle are checked before anything is
        sent.

        :param cert: Path to the PEM client certificate
        :param cert_key: Path to the PEM private key
        :param ca_cert: Path to the PEM CA bundle
        :param cert_role: Name of the certificate role
        :param path: Login path, defaults to ``auth/cert/login``
        """
        if not cert:
            raise ConfigurationError("Vault authentication certificate not provided")
        if not cert_key:
            raise ConfigurationError(
                "Vault authentication certificate key not provided"
            )
        if not ca_cert:
            raise ConfigurationError(
                "Vault authentication CA certificate not provided"
            )
        self._check_certificates(cert, cert_key, ca_cert)
        self.session.cert = (cert, cert_key)
        if self.session.verify is not False:
            self.session.verify = ca_cert
        data = self._request(
            "POST",
            path or VAULT_DEFAULT_CERT_PATH,
            include_body=True,
            json={"name": cert_role},
        )
        return self._store_token(data)

    def _check_certificates(self, cert, cert_key, ca_cert):
        context = ssl.create_default_context()
        try:
            context.load_verify_locations(cafile=ca_cert)
        except (OSError, ssl.SSLError) as err:
            raise ConfigurationError(
                f"Unable to load CA certificate {ca_cert}: {err}"
            ) from err
        try:
            context.load_cert_chain(certfile=cert, keyfile=cert_key)
        except (OSError, ssl.SSLError) as err:
            raise ConfigurationError(
                f"Unable to load client certificate {cert}: {err}"
            ) from err

    def secrets(self, mount, secret, namespace="", version="1"):
        """
        Read a secret.

        Version ``"1"`` engines are asked with a POST carrying a ttl, which is
        what the AWS secrets engine expects. Version ``"2"`` (KV) secrets are read
        with a GET from ``<mount>/data/<secret>``.

        :param mount: The secrets engine mount
        :param secret: The secret (or role) name
        :param namespace: Optional vault namespace
        :param version: ``"1"``, ``"2"`` or empty for ``"1"``

        :rtype: dict
        """
        version = str(version or "1")
        if version not in VAULT_ENGINE_VERSIONS:
            raise ConfigurationError(f"Secrets engine version {version} is not supported")
        mount = mount.strip("/")
        headers = self._token_headers(namespace)
        if version == "2":
            data = self._request("GET", f"{mount}/data/{secret}", headers=headers)
        else:
            data = self._request(
                "POST",
                f"{mount}/{secret}",
                headers=headers,
                json={"ttl": VAULT_SECRET_TTL},
            )
        return decode_secret(data, version)

    def mount_point_version(self, mount):
        """
        Ask the vault which version the secrets engine at ``mount`` runs.

        :rtype: str
        """
        data = self._request(
            "GET", f"sys/mounts/{mount.strip('/')}/tune", headers=self._token_headers()
        )
        try:
            version = TUNE_RESPONSE(data)["options"]["version"]
        except Invalid as err:
            raise AuthError(f"Version not found for mount {mount}: {err}") from err
        return str(version)

    def raw_api(self, path):
        """Authenticated GET of any API path, returning the decoded JSON"""
        return self._request("GET", path, headers=self._token_headers())


def auth_params(settings):
    """Pick the authentication parameters for the configured method"""
    method = (settings.vault_auth_method or VAULT_AUTH_TOKEN).lower()
    if method == VAULT_AUTH_APPROLE:
        return {
            "role_id": settings.vault_auth_role_id,
            "secret_id": settings.vault_auth_secret_id,
            "path": settings.vault_auth_approle_path,
        }
    if method == VAULT_AUTH_CERT:
        return {
            "cert": settings.vault_auth_cert,
            "cert_key": settings.vault_auth_cert_key,
            "ca_cert": settings.vault_auth_cert_ca,
            "cert_role": settings.vault_auth_cert_role,
            "path": settings.vault_auth_cert_path,
        }
    if method == VAULT_AUTH_TOKEN:
        return {"token": settings.vault_auth_token}
    return {}


def load_credentials(settings, role, session=None):
    """
    Exchange ``role`` for temporary S3 credentials.

    The vault session only lives for this call.

    :param settings: The process settings
    :param role: The vault role that grants access to the bucket
    :param session: Optional :py:class:`requests.Session` for the vault transport

    :type settings: :py:class:`~.s3ferry.config.Settings`
    :type role: str

    :rtype: :py:class:`Credential`
    """
    loggit = logging.getLogger("s3ferry.vault")
    if not settings.vault_address:
        raise ConfigurationError("Vault address not provided")
    if not role:
        raise ConfigurationError("Vault role not provided")
    engine_path = normalize_engine_path(settings.vault_engine_path)
    version = settings.vault_engine_version or "1"
    if version != VAULT_ENGINE_VERSION_AUTO and version not in VAULT_ENGINE_VERSIONS:
        raise ConfigurationError(f"Secrets engine version {version} is not supported")

    vault = Vault(
        settings.vault_address,
        token=settings.vault_auth_token,
        ssl_no_validate=settings.vault_ssl_no_validate,
        session=session,
    )
    try:
        vault.authenticate(settings.vault_auth_method, **auth_params(settings))
        if version == VAULT_ENGINE_VERSION_AUTO:
            version = vault.mount_point_version(engine_path)
            loggit.debug("Secrets engine %s runs version %s", engine_path, version)
        loggit.info("Requesting credentials for role %s", role)
        bundle = vault.secrets(
            sts_mount(engine_path), role, settings.vault_namespace, version
        )
    finally:
        vault.close()

    if not bundle.get(STS_ACCESS_KEY) or not bundle.get(STS_SECRET_KEY):
        raise AuthError(f"Vault did not return credentials for role {role}")
    return Credential(
        access_key=bundle[STS_ACCESS_KEY],
        secret_key=bundle[STS_SECRET_KEY],
        session_token=bundle.get(STS_SESSION_TOKEN, ""),
    )

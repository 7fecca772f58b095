"""
Tests for settings loading.
"""

from faib_tools.config import Settings, get_settings


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.sheepcrm_base_url == "https://sls-api.sheepcrm.com"
        assert s.assessor_form_uri == "/faib/form/66ab99d17039ceb319c18bde/"
        assert s.licence_url_expiry_seconds == 300
        assert s.aws_region == "eu-west-2"

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("SHEEPCRM_API_KEY", "env-key")
        monkeypatch.setenv("SHEEPCRM_BUCKET", "faib")
        monkeypatch.setenv("LICENCE_URL_EXPIRY_SECONDS", "60")
        s = Settings(_env_file=None)
        assert s.sheepcrm_api_key == "env-key"
        assert s.licence_url_expiry_seconds == 60
        assert s.is_sheepcrm_configured()

    def test_sheepcrm_needs_key_and_bucket(self, monkeypatch):
        monkeypatch.delenv("SHEEPCRM_BUCKET", raising=False)
        s = Settings(_env_file=None, sheepcrm_api_key="key")
        assert not s.is_sheepcrm_configured()

    def test_unknown_variables_ignored(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SHEEPCRM_BUCKET=faib\nSOMETHING_ELSE=1\n")
        s = Settings(_env_file=env_file)
        assert s.sheepcrm_bucket == "faib"

    def test_get_settings_is_shared(self):
        assert get_settings() is get_settings()

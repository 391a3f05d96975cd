"""AllSetting 校验测试。"""
import pytest

from xpanel.core.exceptions import ValidationError
from xpanel.schemas.setting import AllSetting, normalize_base_path

from conftest import make_all_setting


class TestCheckValid:
    def test_defaults_are_valid(self):
        make_all_setting().check_valid()

    @pytest.mark.parametrize("listen", ["", "127.0.0.1", "::1", "0.0.0.0"])
    def test_listen_accepts_ip(self, listen):
        make_all_setting(web_listen=listen).check_valid()

    def test_listen_rejects_hostname(self):
        with pytest.raises(ValidationError, match="web listen"):
            make_all_setting(web_listen="localhost").check_valid()

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_port_range(self, port):
        with pytest.raises(ValidationError, match="web port"):
            make_all_setting(web_port=port).check_valid()

    def test_negative_session_max_age(self):
        with pytest.raises(ValidationError, match="session max age"):
            make_all_setting(session_max_age=-1).check_valid()

    def test_session_max_age_upper_bound(self):
        make_all_setting(session_max_age=2 ** 31 - 1).check_valid()
        with pytest.raises(ValidationError, match="session max age"):
            make_all_setting(session_max_age=2 ** 31).check_valid()

    def test_cert_without_key(self):
        with pytest.raises(ValidationError, match="set together"):
            make_all_setting(web_cert_file="/etc/ssl/panel.crt").check_valid()

    def test_missing_cert_files(self, tmp_path):
        with pytest.raises(ValidationError, match="invalid"):
            make_all_setting(
                web_cert_file=str(tmp_path / "missing.crt"),
                web_key_file=str(tmp_path / "missing.key"),
            ).check_valid()

    @pytest.mark.parametrize("template", ["{not json", "[]", ""])
    def test_template_must_be_json_object(self, template):
        with pytest.raises(ValidationError, match="xray template"):
            make_all_setting(xray_template_config=template).check_valid()

    def test_unknown_time_location(self):
        with pytest.raises(ValidationError, match="time location"):
            make_all_setting(time_location="Mars/Olympus_Mons").check_valid()

    @pytest.mark.parametrize("name", ["America", "Etc"])
    def test_zone_directory_is_not_a_location(self, name):
        with pytest.raises(ValidationError, match="time location"):
            make_all_setting(time_location=name).check_valid()

    def test_base_path_normalized(self):
        all_setting = make_all_setting(web_base_path="panel")
        all_setting.check_valid()
        assert all_setting.web_base_path == "/panel/"


class TestExternalForm:
    def test_parse_by_alias(self):
        data = make_all_setting().to_external()
        data["webPort"] = "2053"
        assert AllSetting(**data).web_port == 2053

    def test_to_external_keys(self):
        assert set(make_all_setting().to_external()) == {
            "webListen", "webPort", "webCertFile", "webKeyFile",
            "webBasePath", "sessionMaxAge", "timeLocation", "xrayTemplateConfig",
        }

    @pytest.mark.parametrize("raw, expected", [("api", "/api/"), ("/x/", "/x/"), ("", "/")])
    def test_normalize_base_path(self, raw, expected):
        assert normalize_base_path(raw) == expected

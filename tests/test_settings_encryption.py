import os
import sys
import unittest
import keyring
import yaml
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from auth_context import AuthContext
from config import YamlConfig, load_settings

class DummyKeyring(keyring.backend.KeyringBackend):
    priority = 1
    def __init__(self):
        self.store = {}
    def get_password(self, service, username):
        return self.store.get((service, username))
    def set_password(self, service, username, password):
        self.store[(service, username)] = password
    def delete_password(self, service, username):
        self.store.pop((service, username), None)

class SettingsEncryptionTest(unittest.TestCase):
    def setUp(self) -> None:
        self.ring = DummyKeyring()
        keyring.set_keyring(self.ring)
        os.environ['ENCRYPT_SETTINGS'] = '1'
        self.path = 'enc_settings.yaml'
        if os.path.exists(self.path):
            os.remove(self.path)

    def tearDown(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
        os.environ.pop('ENCRYPT_SETTINGS', None)

    def test_encrypt_and_load(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({'token': 'secret', 'username': 'sam'})
        self.assertTrue(os.path.exists(self.path))
        with open(self.path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f)
        self.assertNotEqual(raw['token'], 'secret')
        data = cfg.load()
        self.assertEqual(data['token'], 'secret')
        self.assertEqual(data['username'], 'sam')

    def test_clear_removes_secret(self) -> None:
        cfg = YamlConfig(self.path)
        ctx = AuthContext(cfg)
        ctx.store('sam', 'secret')
        self.assertEqual(self.ring.get_password(cfg.service, 'token'), 'secret')
        ctx.clear()
        self.assertIsNone(self.ring.get_password(cfg.service, 'token'))
        self.assertFalse(AuthContext.from_storage(cfg).is_authenticated)


class LoadSettingsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.path = 'client_settings.yaml'
        with open(self.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump({'api_base_url': 'http://gym.local/api/v1.0', 'log_level': 'debug', 'token': 't'}, f)

    def tearDown(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
        os.environ.pop('API_BASE_URL', None)
        os.environ.pop('LOG_LEVEL', None)

    def test_file_values(self) -> None:
        settings = load_settings(self.path)
        self.assertEqual(settings.api_base_url, 'http://gym.local/api/v1.0')
        self.assertEqual(settings.log_level, 'DEBUG')
        self.assertEqual(settings.request_timeout, 10.0)

    def test_environment_overrides(self) -> None:
        os.environ['API_BASE_URL'] = 'http://other:9000/api/v1.0'
        os.environ['LOG_LEVEL'] = 'warning'
        settings = load_settings(self.path)
        self.assertEqual(settings.api_base_url, 'http://other:9000/api/v1.0')
        self.assertEqual(settings.log_level, 'WARNING')

    def test_invalid_level_rejected(self) -> None:
        os.environ['LOG_LEVEL'] = 'LOUD'
        with self.assertRaises(ValueError):
            load_settings(self.path)

    def test_missing_file_defaults(self) -> None:
        settings = load_settings('missing_settings.yaml')
        self.assertEqual(settings.api_base_url, 'http://localhost:8080/api/v1.0')

if __name__ == '__main__':
    unittest.main()

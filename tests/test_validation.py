import unittest
from unittest import mock
from composable import validation
from composable.allocators import HeapAllocator
from composable.config import Config
from composable.strings import Str

class TestIsValid(unittest.TestCase):
    def test_well_formed(self):
        for data in (b'', b'ascii', '日本語'.encode(), '\U0001F600'.encode(), b'\xf4\x8f\xbf\xbf'):
            with self.subTest(data=data):
                self.assertTrue(validation.is_valid(data))

    def test_malformed(self):
        cases = {
            b'\xe6\x97': 'truncated',
            b'\xc0\xaf': 'overlong',
            b'\xe0\x80\xaf': 'overlong three byte',
            b'\xf4\x90\x80\x80': 'above U+10FFFF',
            b'a\x80b': 'lone continuation',
            b'\xff': 'invalid byte',
        }
        for data, reason in cases.items():
            with self.subTest(reason=reason):
                self.assertFalse(validation.is_valid(data, allow_surrogates=True))

    def test_accepts_bytes_like(self):
        self.assertTrue(validation.is_valid(bytearray(b'abc')))
        self.assertTrue(validation.is_valid(memoryview(b'abc')))

    def test_first_invalid_offset(self):
        self.assertIsNone(validation.first_invalid_offset(b'fine'))
        self.assertEqual(validation.first_invalid_offset(b'ab\xe3\x80'), 2)
        self.assertEqual(validation.first_invalid_offset(b'\xff'), 0)

class TestSurrogatePolicy(unittest.TestCase):
    SURROGATE = b'a\xed\xa0\x80b'

    def test_strict_by_default(self):
        self.assertFalse(validation.is_valid(self.SURROGATE, allow_surrogates=False))

    def test_lenient_when_allowed(self):
        self.assertTrue(validation.is_valid(self.SURROGATE, allow_surrogates=True))

    def test_policy_from_config(self):
        with mock.patch('composable.validation.get_config', return_value=Config(allow_surrogates=True)):
            self.assertTrue(validation.is_valid(self.SURROGATE))
        with mock.patch('composable.validation.get_config', return_value=Config(allow_surrogates=False)):
            self.assertFalse(validation.is_valid(self.SURROGATE))

    def test_str_follows_config(self):
        heap = HeapAllocator()
        with Str.init(heap, b' \xed\xa0\x80 ') as s:
            with mock.patch('composable.validation.get_config', return_value=Config(allow_surrogates=False)):
                self.assertFalse(s.is_valid_utf8())
                s.trim()
                self.assertEqual(s.u8, b' \xed\xa0\x80 ')
            with mock.patch('composable.validation.get_config', return_value=Config(allow_surrogates=True)):
                self.assertTrue(s.is_valid_utf8())
                s.trim()
                self.assertEqual(s.u8, b'\xed\xa0\x80')

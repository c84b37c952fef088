# -*- coding: utf-8 -*-
""" Test the on-disk cookie cache. """

import json
import os
import shutil
import stat
import tempfile
import time
import unittest

from requests.cookies import RequestsCookieJar

from fedora_session.client.cookiecache import (
    CachedCookies, CookieCache, dump_cookies)

LOGIN_URL = 'https://app.example.org/login'


def make_jar(expires=None):
    jar = RequestsCookieJar()
    jar.set('session', 's3cr3t', domain='app.example.org', path='/',
            expires=expires, secure=True)
    jar.set('visit', 'v1', domain='.example.org', path='/app')
    return jar


class CookieCacheTest(unittest.TestCase):

    """Test storing and loading cookie jars."""

    def setUp(self):
        self.cachedir = tempfile.mkdtemp('cookiecache')
        self.path = os.path.join(self.cachedir, 'cookies.json')
        self.cache = CookieCache(self.path)

    def tearDown(self):
        shutil.rmtree(self.cachedir)

    def rewrite(self, **changes):
        with open(self.path) as f:
            data = json.load(f)
        data.update(changes)
        with open(self.path, 'w') as f:
            json.dump(data, f)

    def test_round_trip(self):
        """A stored jar loads back equal."""
        jar = make_jar(expires=int(time.time()) + 3600)
        self.assertTrue(self.cache.store(jar, LOGIN_URL, 'ralph'))

        cached = self.cache.load(LOGIN_URL, 'ralph')
        self.assertIsNotNone(cached)
        self.assertEqual(dump_cookies(cached.jar), dump_cookies(jar))
        self.assertEqual(cached.login_url, LOGIN_URL)
        self.assertEqual(cached.username, 'ralph')

    def test_load_is_idempotent(self):
        self.cache.store(make_jar(), LOGIN_URL, 'ralph')
        first = self.cache.load(LOGIN_URL, 'ralph')
        second = self.cache.load(LOGIN_URL, 'ralph')
        self.assertEqual(dump_cookies(first.jar), dump_cookies(second.jar))
        self.assertEqual(first.timestamp, second.timestamp)

    def test_store_creates_directory(self):
        """The first store creates the missing cache directory."""
        path = os.path.join(self.cachedir, 'not', 'there', 'cookies.json')
        cache = CookieCache(path)
        self.assertTrue(cache.store(make_jar()))
        self.assertTrue(os.path.isdir(os.path.dirname(path)))
        self.assertIsNotNone(cache.load())

    def test_file_is_private(self):
        self.cache.store(make_jar())
        mode = stat.S_IMODE(os.stat(self.path).st_mode)
        self.assertEqual(mode & 0o077, 0)

    def test_store_failure_is_soft(self):
        """A directory that cannot be created makes store return False."""
        blocker = os.path.join(self.cachedir, 'file')
        with open(blocker, 'w') as f:
            f.write('not a directory')
        cache = CookieCache(os.path.join(blocker, 'sub', 'cookies.json'))
        self.assertFalse(cache.store(make_jar()))

    def test_missing_file(self):
        self.assertIsNone(self.cache.load())

    def test_missing_directory(self):
        cache = CookieCache(os.path.join(self.cachedir, 'nope', 'c.json'))
        self.assertIsNone(cache.load())

    def test_corrupt_file_is_removed(self):
        with open(self.path, 'w') as f:
            f.write('{"cookies": [')
        os.chmod(self.path, 0o600)
        self.assertIsNone(self.cache.load())
        self.assertFalse(os.path.exists(self.path))

    def test_unknown_format_is_removed(self):
        self.cache.store(make_jar())
        self.rewrite(version=42)
        self.assertIsNone(self.cache.load())
        self.assertFalse(os.path.exists(self.path))

    def test_world_readable_file_ignored(self):
        self.cache.store(make_jar())
        os.chmod(self.path, 0o644)
        self.assertIsNone(self.cache.load())

    def test_store_replaces_unsafe_file(self):
        with open(self.path, 'w') as f:
            f.write('{}')
        os.chmod(self.path, 0o666)
        self.assertTrue(self.cache.store(make_jar()))
        self.assertIsNotNone(self.cache.load())

    def test_expired_entry(self):
        """An entry older than max_age loads as a miss."""
        self.cache.store(make_jar())
        self.rewrite(timestamp=time.time() - self.cache.max_age - 10)
        self.assertIsNone(self.cache.load())

    def test_custom_max_age(self):
        cache = CookieCache(self.path, max_age=60)
        cache.store(make_jar())
        self.rewrite(timestamp=time.time() - 120)
        self.assertIsNone(cache.load())
        self.assertIsNotNone(CookieCache(self.path, max_age=None).load())

    def test_expired_cookie(self):
        """A cookie past its expiry date makes the whole jar stale."""
        self.cache.store(make_jar(expires=int(time.time()) + 3600))
        with open(self.path) as f:
            data = json.load(f)
        for cookie in data['cookies']:
            if cookie['name'] == 'session':
                cookie['expires'] = int(time.time()) - 10
        with open(self.path, 'w') as f:
            json.dump(data, f)
        self.assertIsNone(self.cache.load())

    def test_other_login_url(self):
        self.cache.store(make_jar(), LOGIN_URL, 'ralph')
        self.assertIsNone(
            self.cache.load('https://other.example.org/login', 'ralph'))

    def test_other_user(self):
        self.cache.store(make_jar(), LOGIN_URL, 'ralph')
        self.assertIsNone(self.cache.load(LOGIN_URL, 'pingou'))

    def test_store_overwrites(self):
        """There is only ever one jar per cache file."""
        self.cache.store(make_jar(), LOGIN_URL, 'ralph')
        other = RequestsCookieJar()
        other.set('session', 'other', domain='app.example.org', path='/')
        self.cache.store(other, LOGIN_URL, 'pingou')
        self.assertIsNone(self.cache.load(LOGIN_URL, 'ralph'))
        cached = self.cache.load(LOGIN_URL, 'pingou')
        self.assertEqual(dump_cookies(cached.jar), dump_cookies(other))

    def leave_stale_lock(self):
        # What a process killed while holding the lock leaves behind
        open(self.path + '.lock', 'w').close()

    def test_store_breaks_stale_lock(self):
        cache = CookieCache(self.path, lock_timeout=0.2)
        self.leave_stale_lock()
        self.assertTrue(cache.store(make_jar()))
        self.assertFalse(os.path.exists(self.path + '.lock'))

    def test_load_breaks_stale_lock(self):
        cache = CookieCache(self.path, lock_timeout=0.2)
        cache.store(make_jar(), LOGIN_URL, 'ralph')
        self.leave_stale_lock()
        self.assertIsNotNone(cache.load(LOGIN_URL, 'ralph'))
        self.assertFalse(os.path.exists(self.path + '.lock'))

    def test_clear(self):
        self.cache.store(make_jar())
        self.cache.clear()
        self.assertFalse(os.path.exists(self.path))
        # Clearing twice is fine
        self.cache.clear()


class CachedCookiesTest(unittest.TestCase):

    """Test the freshness rules."""

    def test_fresh_within_window(self):
        cached = CachedCookies(make_jar(), 1000.0)
        self.assertTrue(cached.is_fresh(60, now=1059.9))

    def test_stale_at_the_edge(self):
        cached = CachedCookies(make_jar(), 1000.0)
        self.assertFalse(cached.is_fresh(60, now=1060.0))

    def test_stale_after_window(self):
        cached = CachedCookies(make_jar(), 1000.0)
        self.assertFalse(cached.is_fresh(60, now=5000.0))

    def test_no_max_age(self):
        cached = CachedCookies(make_jar(), 1000.0)
        self.assertTrue(cached.is_fresh(None, now=10 ** 9))

    def test_cookie_expiry(self):
        cached = CachedCookies(make_jar(expires=1030), 1000.0)
        self.assertTrue(cached.is_fresh(60, now=1029))
        self.assertFalse(cached.is_fresh(60, now=1030))
        self.assertFalse(cached.is_fresh(None, now=1031))

    def test_dict_round_trip(self):
        cached = CachedCookies(make_jar(), 1000.0, LOGIN_URL, 'ralph')
        again = CachedCookies.from_dict(
            json.loads(json.dumps(cached.to_dict())))
        self.assertEqual(again.timestamp, 1000.0)
        self.assertEqual(again.username, 'ralph')
        self.assertEqual(dump_cookies(again.jar), dump_cookies(cached.jar))

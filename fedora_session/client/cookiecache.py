# -*- coding: utf-8 -*-
#
# Copyright (C) 2013-2015  Red Hat, Inc.
# This file is part of fedora-session
#
# fedora-session is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 2.1 of the License, or (at your option) any later version.
#
# fedora-session is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with fedora-session; if not, see <http://www.gnu.org/licenses/>
#
"""On-disk cache for the cookies of an OpenID session.

The cache holds exactly one cookie jar per file, together with the time it
was written and the login url and username it belongs to.  Nothing in here
is critical: every problem reading or writing the file is logged and turned
into a cache miss so that the caller falls back to a fresh login.

.. moduleauthor:: Pierre-Yves Chibon <pingou@fedoraproject.org>
.. moduleauthor:: Ralph Bean <rbean@redhat.com>

"""

import json
import logging
import os
import time
from contextlib import contextmanager

import lockfile
from kitchen.text.converters import to_unicode
from requests.cookies import RequestsCookieJar, create_cookie

from fedora_session import _
from fedora_session.client import (CacheUnavailableError,
                                   UnsafeFileError,
                                   check_file_permissions)

log = logging.getLogger(__name__)

SESSION_DIR = os.path.join(os.path.expanduser('~'), '.fedora')
SESSION_FILE = os.path.join(SESSION_DIR, 'openid-session-cookies.json')

# One day
DEFAULT_MAX_AGE = 86400

# Seconds to wait for another process holding the cache lock
LOCK_TIMEOUT = 10

CACHE_FORMAT = 1

_COOKIE_FIELDS = ('name', 'value', 'domain', 'path', 'expires', 'secure')


def dump_cookies(jar):
    """Return the cookies of a jar as a list of plain dicts.

    The list is sorted so that two jars holding the same cookies dump to
    equal lists.
    """
    cookies = [dict((field, getattr(cookie, field))
                    for field in _COOKIE_FIELDS) for cookie in jar]
    cookies.sort(key=lambda c: (c['domain'], c['path'], c['name']))
    return cookies


def load_cookies(cookies):
    """Build a :class:`requests.cookies.RequestsCookieJar` from
    :func:`dump_cookies` output."""
    jar = RequestsCookieJar()
    for entry in cookies:
        jar.set_cookie(create_cookie(
            entry['name'], entry['value'],
            domain=entry.get('domain') or '',
            path=entry.get('path') or '/',
            expires=entry.get('expires'),
            secure=bool(entry.get('secure', False))))
    return jar


class CachedCookies(object):

    """A cookie jar read from (or about to be written to) the cache.

    .. attribute:: jar

        The :class:`~requests.cookies.RequestsCookieJar`.

    .. attribute:: timestamp

        Seconds since the epoch at which the jar was written.

    .. attribute:: login_url

        Login url of the service the cookies were obtained from.

    .. attribute:: username

        User the cookies belong to.

    """

    def __init__(self, jar, timestamp, login_url=None, username=None):
        self.jar = jar
        self.timestamp = timestamp
        self.login_url = login_url
        self.username = username

    def is_fresh(self, max_age, now=None):
        """Tell whether the jar may still be used.

        An entry is stale once it is `max_age` seconds old (an entry exactly
        `max_age` seconds old is stale) or as soon as one of its cookies has
        expired.  A `max_age` of None only checks the cookie expiry dates.
        """
        if now is None:
            now = time.time()
        if max_age is not None and now - self.timestamp >= max_age:
            return False
        for cookie in self.jar:
            if cookie.expires is not None and cookie.expires <= now:
                return False
        return True

    def to_dict(self):
        return {
            'version': CACHE_FORMAT,
            'login_url': self.login_url,
            'username': self.username,
            'timestamp': self.timestamp,
            'cookies': dump_cookies(self.jar),
        }

    @classmethod
    def from_dict(cls, data):
        if data.get('version') != CACHE_FORMAT:
            raise ValueError('Unknown cookie cache format %r'
                             % data.get('version'))
        return cls(load_cookies(data['cookies']),
                   float(data['timestamp']),
                   login_url=data.get('login_url'),
                   username=data.get('username'))


class CookieCache(object):

    """A single cookie jar kept in a file.

    :kwarg path: File to keep the cookies in.  Defaults to
        :data:`SESSION_FILE` (``~/.fedora/openid-session-cookies.json``).
    :kwarg max_age: Number of seconds a stored jar is considered fresh.
        None means that only the expiry of the cookies themselves is
        checked.
    :kwarg lock_timeout: Seconds to wait for the lock on the cache file
        before treating it as stale and breaking it.
    """

    def __init__(self, path=None, max_age=DEFAULT_MAX_AGE,
                 lock_timeout=LOCK_TIMEOUT):
        self.path = path or SESSION_FILE
        self.max_age = max_age
        self.cache_lock = lockfile.FileLock(self.path, timeout=lock_timeout)

    def load(self, login_url=None, username=None):
        """Return the cached cookies if they are usable.

        :kwarg login_url: If given, only a jar obtained from this login url
            is returned.
        :kwarg username: If given, only a jar belonging to this user is
            returned.
        :returns: a :class:`CachedCookies` or None on a cache miss.  A
            missing, unreadable, corrupt, foreign or stale cache file are
            all cache misses.
        """
        try:
            cached = self._read()
        except CacheUnavailableError as e:
            log.debug('Cookie cache not used: %s', to_unicode(e))
            return None

        if login_url is not None and cached.login_url != login_url:
            log.debug('Cached cookies are for %s, not %s',
                      cached.login_url, login_url)
            return None
        if username is not None and cached.username != username:
            log.debug('Cached cookies belong to %s, not %s',
                      cached.username, username)
            return None
        if not cached.is_fresh(self.max_age):
            log.debug('Cached cookies in %s are expired', self.path)
            return None
        return cached

    def store(self, jar, login_url=None, username=None):
        """Write a cookie jar to the cache, replacing what was there.

        The directory holding the cache file is created if it does not exist
        yet.

        :arg jar: The cookie jar to save.
        :kwarg login_url: Login url the cookies were obtained from.
        :kwarg username: User the cookies belong to.
        :returns: True if the jar was written, False otherwise.
        """
        cached = CachedCookies(jar, time.time(), login_url=login_url,
                               username=username)
        try:
            self._write(cached)
        except CacheUnavailableError as e:
            log.warning(_('Unable to write to cookie cache %(file)s:'
                          ' %(error)s') % {'file': self.path,
                                           'error': to_unicode(e)})
            return False
        log.debug('Saved %s cookies to %s', len(jar), self.path)
        return True

    def clear(self):
        """Remove the cache file."""
        try:
            os.unlink(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            log.warning(_('Unable to remove cookie cache %(file)s:'
                          ' %(error)s') % {'file': self.path,
                                           'error': to_unicode(e)})

    @contextmanager
    def _locked(self):
        """Hold the cache lock.

        A lock still held after waiting the lock timeout was left behind by
        a process that died while holding it.  It is broken once.
        """
        try:
            self.cache_lock.acquire()
        except lockfile.LockTimeout:
            log.warning(_('Breaking stale lock on cookie cache %(file)s')
                        % {'file': self.path})
            self.cache_lock.break_lock()
            self.cache_lock.acquire()
        try:
            yield
        finally:
            self.cache_lock.release()

    def _read(self):
        try:
            check_file_permissions(self.path)
        except UnsafeFileError as e:
            raise CacheUnavailableError(str(e))
        except OSError as e:
            raise CacheUnavailableError(
                'No cookie cache at %s: %s' % (self.path, e.strerror))

        try:
            with self._locked():
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            return CachedCookies.from_dict(data)
        except (OSError, lockfile.Error) as e:
            raise CacheUnavailableError(
                'Unable to read %s: %s' % (self.path, e))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            self._discard_corrupt(e)
            raise CacheUnavailableError(
                'Cookie cache %s was corrupt: %s' % (self.path, e))

    def _discard_corrupt(self, error):
        log.info(_('Removing corrupt cookie cache %(file)s: %(error)s')
                 % {'file': self.path, 'error': to_unicode(error)})
        try:
            os.unlink(self.path)
        except OSError as e:
            log.warning(_('Unable to remove corrupt cookie cache %(file)s:'
                          ' %(error)s') % {'file': self.path,
                                           'error': to_unicode(e)})

    def _write(self, cached):
        directory = os.path.dirname(self.path)
        if directory and not os.path.isdir(directory):
            log.debug('Creating %s', directory)
            try:
                os.makedirs(directory, mode=0o750)
            except OSError as e:
                raise CacheUnavailableError(
                    'Unable to create %s: %s' % (directory, e))

        try:
            check_file_permissions(self.path, allow_notexists=True)
        except UnsafeFileError as e:
            log.debug('Replacing cookie cache: %s', to_unicode(e))
            try:
                os.unlink(self.path)
            except OSError as err:
                raise CacheUnavailableError(str(err))
        except OSError as e:
            raise CacheUnavailableError(str(e))

        oldmask = os.umask(0o077)
        try:
            with self._locked():
                with open(self.path, 'w', encoding='utf-8') as f:
                    json.dump(cached.to_dict(), f)
        except (OSError, lockfile.Error) as e:
            raise CacheUnavailableError(
                'Unable to write %s: %s' % (self.path, e))
        finally:
            os.umask(oldmask)


__all__ = ('CookieCache', 'CachedCookies', 'dump_cookies', 'load_cookies',
           'DEFAULT_MAX_AGE', 'SESSION_DIR', 'SESSION_FILE')

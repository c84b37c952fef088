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

"""Session authenticated against the Fedora OpenID provider.

.. moduleauthor:: Pierre-Yves Chibon <pingou@fedoraproject.org>
.. moduleauthor:: Toshio Kuratomi <toshio@fedoraproject.org>
.. moduleauthor:: Ralph Bean <rbean@redhat.com>

"""

import logging

from fedora_session import _
from fedora_session.client import AuthError
from fedora_session.client.cookiecache import CookieCache, DEFAULT_MAX_AGE
from fedora_session.client.openidlogin import (
    FEDORA_OPENID_API, FEDORA_OPENID_STG_API, openid_login)
from fedora_session.client.session import Session, requires_login

log = logging.getLogger(__name__)


class OpenIdSession(Session):

    """ A session for web services relying on Fedora OpenID auth.

    Creating the session first looks for fresh cookies of the same user and
    login url in the cookie cache.  Only if there are none, the user is
    logged in with the given password.  A failed login raises; it is never
    retried.
    """

    is_authenticated = True

    def __init__(self, login_url, username, password=None,
                 auth_url=FEDORA_OPENID_API, cache_cookies=True,
                 cache_path=None, max_age=DEFAULT_MAX_AGE,
                 openid_insecure=False, **kwargs):
        """Log into a web service relying on fas_openid auth.

        :arg login_url: The url to the login endpoint of the application.
        :arg username: the FAS username to log in as
        :kwarg password: the FAS password of `username`.  It is only needed
            when no fresh cookies are cached.  It is not kept around after
            the login.
        :kwarg auth_url: The JSON API endpoint of the OpenID provider.
            Defaults to the production Fedora OpenID provider.
        :kwarg cache_cookies: If set to true, cache the user's session
            cookies on the filesystem between runs
        :kwarg cache_path: File to cache the cookies in.  Defaults to
            ``~/.fedora/openid-session-cookies.json``
        :kwarg max_age: Seconds cached cookies are reused for.  None means
            until the cookies themselves expire.
        :kwarg openid_insecure: If True, do not check the openid server
            certificates against their CA's.  This means that man-in-the-
            middle attacks are possible against the session. You might
            turn this option on for testing against a local version of a
            server with a self-signed certificate but it should be off in
            production.

        Any other keyword argument is passed on to :class:`Session`.
        """
        super(OpenIdSession, self).__init__(**kwargs)
        self.login_url = login_url
        self.username = username
        self.auth_url = auth_url
        self.openid_insecure = openid_insecure
        self.cache_cookies = cache_cookies
        self.cache = CookieCache(cache_path, max_age=max_age)
        self._params = None

        if self._load_cookies():
            return
        self.login(username, password)

    @classmethod
    def staging(cls, login_url, username, password=None, **kwargs):
        """Create a session against the staging OpenID provider."""
        kwargs['auth_url'] = FEDORA_OPENID_STG_API
        return cls(login_url, username, password, **kwargs)

    @property
    def params(self):
        """The :class:`~fedora_session.client.openidlogin.OpenIDParameters`
        of the last login.

        None if the cookies of this session came out of the cache.
        """
        return self._params

    def login(self, username, password):
        """ Open a session for the user.

        Log in the user with the specified username and password
        against the FAS OpenID server.  The login runs on a session of its
        own: if it fails, the cookies of this session are left alone.

        :arg username: the FAS username of the user that wants to log in
        :arg password: the FAS password of the user that wants to log in
        :returns: the OpenID parameters returned by the provider

        """
        if not username:
            raise AuthError(_("Username may not be %r at login.") % username)
        if not password:
            raise AuthError(_("Password required for login."))

        scratch = self._new_requests_session()
        params = openid_login(
            session=scratch,
            login_url=self.login_url,
            username=username,
            password=password,
            auth_url=self.auth_url,
            openid_insecure=self.openid_insecure,
            timeout=self.timeout)
        log.debug('Logged into %s as %s', self.login_url, username)

        self._session.cookies.clear()
        self._session.cookies.update(scratch.cookies)
        self.username = username
        self._params = params
        self._save_cookies()
        return params

    def logout(self):
        """Forget the session cookies, also in the cache."""
        self._session.cookies.clear()
        self._params = None
        if self.cache_cookies:
            self.cache.clear()

    @requires_login
    def get(self, url, params=None, **kwargs):
        return super(OpenIdSession, self).get(url, params=params, **kwargs)

    @requires_login
    def post(self, url, data=None, **kwargs):
        return super(OpenIdSession, self).post(url, data=data, **kwargs)

    def _load_cookies(self):
        if not self.cache_cookies:
            return False

        cached = self.cache.load(login_url=self.login_url,
                                 username=self.username)
        if cached is None:
            log.debug('No fresh cached session for %s', self.username)
            return False

        self._session.cookies.update(cached.jar)
        log.debug('Reusing cached session for %s', self.username)
        return True

    def _save_cookies(self):
        if not self.cache_cookies:
            return

        self.cache.store(self._session.cookies, login_url=self.login_url,
                         username=self.username)


__all__ = ('OpenIdSession',)

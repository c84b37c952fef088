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
"""Sessions to talk to Fedora Services.

:class:`Session` holds what every session does: a :mod:`requests` session
with our default headers, and the :meth:`~Session.get`,
:meth:`~Session.post` and :meth:`~Session.send_request` methods.
:class:`AnonymousSession` is the variant without any credentials.  The
authenticated variant is
:class:`fedora_session.client.openidsession.OpenIdSession`.  Code written
against one works with the other.

.. moduleauthor:: Pierre-Yves Chibon <pingou@fedoraproject.org>
.. moduleauthor:: Toshio Kuratomi <toshio@fedoraproject.org>
.. moduleauthor:: Ralph Bean <rbean@redhat.com>

"""

import copy
import logging
from functools import wraps
from http import client as httplib

import requests
from kitchen.text.converters import to_unicode
from munch import munchify

from fedora_session import __version__
from fedora_session.client import AuthError, LoginRequiredError, ServerError
from fedora_session.client.openidlogin import OPENID_TRANSACTION_TITLE
from fedora_session.urlutils import absolute_url

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def requires_login(func):
    """
    Decorator function for get or post requests requiring login.

    Decorate a request method whose response tells whether the server still
    accepts our session.  Example::

        from fedora_session.client.session import requires_login

        @requires_login
        def get(self, url):
            return self.session.get(url)
    """
    def _decorator(request, *args, **kwargs):
        """ Run the function and check if it redirected to the openid form.
        Or if we got a 403
        """
        output = func(request, *args, **kwargs)
        if output.status_code == 403:
            raise LoginRequiredError(
                '{0} requires a logged in user'.format(output.url))
        elif OPENID_TRANSACTION_TITLE in output.text:
            raise LoginRequiredError(
                '{0} requires a logged in user'.format(output.url))
        return output
    return wraps(func)(_decorator)


class Session(object):

    """The part every Fedora Service session has in common.

    This class has several attributes.  These may be changed after
    instantiation.

    .. attribute:: base_url

        Url relative request urls are joined to.  None means that every
        request needs a complete url.

    .. attribute:: useragent

        The useragent string that is reported to the web server.

    .. attribute:: timeout

        A float describing the timeout of each request in seconds.

    .. attribute:: insecure

        If :data:`True` then the connection to the server is not checked to be
        sure that any SSL certificate information is valid.  That means that
        a remote host can lie about who it is.  Useful for development but
        should not be used in production code.

    """

    is_authenticated = False

    def __init__(self, base_url=None, useragent=None, timeout=None,
                 insecure=False, debug=False):
        """Create a session.

        :kwarg base_url: Base of relative urls given to the request methods.
        :kwarg useragent: Useragent string to use.  If not given, default to
            "Fedora Session/VERSION"
        :kwarg timeout: A float describing the timeout of the connection.
            Defaults to 30 seconds.
        :kwarg insecure: If True, do not check server certificates against
            their CA's.
        :kwarg debug: If True, log debug information
        """
        self.debug = debug
        # When we are instantiated, go ahead and silence the python-requests
        # log.  It is kind of noisy in our app server logs.
        if not debug:
            requests_log = logging.getLogger("requests")
            requests_log.setLevel(logging.WARN)

        self.base_url = base_url
        self.useragent = useragent or 'Fedora Session/%(version)s' % {
            'version': __version__}
        self.timeout = DEFAULT_TIMEOUT if timeout is None else timeout
        self.insecure = insecure

        # python-requests session.  Holds onto cookies
        self._session = self._new_requests_session()

    def _new_requests_session(self):
        session = requests.session()
        session.headers.update({
            'User-Agent': self.useragent,
            'Accept': 'application/json',
        })
        session.verify = not self.insecure
        return session

    def __get_debug(self):
        """Return whether we have debug logging turned on.

        :Returns: True if debugging is on, False otherwise.

        """
        if log.level <= logging.DEBUG:
            return True
        return False

    def __set_debug(self, debug=False):
        """Change debug level.

        :kwarg debug: A true value to turn debugging on, false value to turn it
            off.
        """
        if debug:
            log.setLevel(logging.DEBUG)
        else:
            log.setLevel(logging.ERROR)

    debug = property(__get_debug, __set_debug, doc="""
    When True, we log extra debugging statements.  When False, we only log
    errors.
    """)

    @property
    def session(self):
        """The wrapped :class:`requests.Session`."""
        return self._session

    @property
    def params(self):
        """OpenID parameters of the login that created this session."""
        return None

    def has_cookies(self):
        return bool(self._session.cookies)

    def _request(self, verb, url, **kwargs):
        url = absolute_url(self.base_url, url)
        kwargs.setdefault('timeout', self.timeout)
        log.debug('Creating request %s %s', verb, to_unicode(url))
        if self.debug and kwargs.get('data'):
            debug_data = copy.deepcopy(kwargs['data'])
            if isinstance(debug_data, dict) and 'password' in debug_data:
                debug_data['password'] = 'xxxxxxx'
            log.debug('Data: %r', debug_data)
        return self._session.request(verb, url, **kwargs)

    def get(self, url, params=None, **kwargs):
        """Issue a GET request.

        :arg url: complete url, or url relative to :attr:`base_url`
        :kwarg params: dict of query string parameters
        :returns: the :class:`requests.Response`
        """
        return self._request('GET', url, params=params, **kwargs)

    def post(self, url, data=None, **kwargs):
        """Issue a POST request.

        :arg url: complete url, or url relative to :attr:`base_url`
        :kwarg data: dict of form parameters to send
        :returns: the :class:`requests.Response`
        """
        return self._request('POST', url, data=data, **kwargs)

    def send_request(self, method, verb='GET', req_params=None, **kwargs):
        """Make an HTTP request to a server method and decode its JSON.

        :arg method: Method to call on the server.  It's a url fragment that
            comes after the :attr:`base_url` set in :meth:`__init__`, or a
            complete url.
        :kwarg verb: HTTP verb to use.  GET and POST are currently supported.
            GET is the default.
        :kwarg req_params: Extra parameters to send to the server.  They go
            into the query string for GET and into the body for POST.
        :rtype: Munch
        :returns: The data from the server
        :raises AuthError: the server refused our credentials
        :raises ServerError: the server answered with an error or not with
            JSON
        """
        if verb == 'GET':
            response = self.get(method, params=req_params, **kwargs)
        elif verb == 'POST':
            response = self.post(method, data=req_params, **kwargs)
        else:
            raise ValueError('Unknown HTTP verb %s' % verb)

        # Note: old TG apps returned 403 Forbidden on authentication
        # failures.
        http_status = response.status_code
        if http_status in (401, 403):
            log.debug('Authentication failed for %s', response.url)
            raise AuthError(
                'Unable to log into server.  Invalid '
                'authentication tokens.  Send new username and password'
            )
        elif http_status >= 400:
            msg = httplib.responses.get(http_status,
                                        'Unknown HTTP Server Response')
            raise ServerError(response.url, http_status, msg)

        try:
            data = response.json()
        except ValueError as e:
            # The response wasn't JSON data
            raise ServerError(
                response.url, http_status, 'Error returned from'
                ' json module while processing %(url)s: %(err)s\n%(output)s' %
                {
                    'url': to_unicode(response.url),
                    'err': to_unicode(e),
                    'output': to_unicode(response.text),
                })

        return munchify(data)


class AnonymousSession(Session):

    """A session without credentials, for public endpoints."""

    pass


__all__ = ('Session', 'AnonymousSession', 'requires_login',
           'DEFAULT_TIMEOUT')

# -*- coding: utf-8 -*-
#
# Copyright (C) 2013-2014  Red Hat, Inc.
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
"""Log into a Fedora Service through the Fedora OpenID provider.

.. moduleauthor:: Pierre-Yves Chibon <pingou@fedoraproject.org>
.. moduleauthor:: Toshio Kuratomi <toshio@fedoraproject.org>
.. moduleauthor:: Ralph Bean <rbean@redhat.com>

"""

import logging
from urllib.parse import urljoin, urlparse

import bs4
from kitchen.text.converters import to_unicode
from munch import Munch
from requests.models import REDIRECT_STATI

from fedora_session import _
from fedora_session.client import AuthError, MalformedResponseError
from fedora_session.urlutils import query_params

log = logging.getLogger(__name__)

FEDORA_OPENID_API = 'https://id.fedoraproject.org/api/v1/'
FEDORA_OPENID_STG_API = 'https://id.stg.fedoraproject.org/api/v1/'

OPENID_TRANSACTION_TITLE = '<title>OpenID transaction in progress</title>'

# Tell the provider (FedOAuth / Ipsilon) to check the password against FAS
AUTH_MODULE = 'fedoauth.auth.fas.Auth_FAS'
AUTH_FLOW = 'fedora'


class OpenIDParameters(Munch):

    """The parameters the OpenID provider returned after a successful login.

    Keys are the raw parameter names (``openid.identity``,
    ``openid.return_to``, ...).  The usual ones are also available as
    attributes without their ``openid.`` prefix.  The mapping is read-only.
    """

    def __init__(self, *args, **kwargs):
        dict.__init__(self, *args, **kwargs)

    def _readonly(self, *args, **kwargs):
        raise TypeError('OpenIDParameters are read-only')

    __setitem__ = __delitem__ = _readonly
    __setattr__ = __delattr__ = _readonly
    update = pop = popitem = clear = setdefault = _readonly

    def copy(self):
        return dict(self)

    def __reduce__(self):
        return (self.__class__, (dict(self),))

    def _param(name):
        return property(lambda self: self.get('openid.' + name))

    assoc_handle = _param('assoc_handle')
    cla_signed_cla = _param('cla.signed_cla')
    claimed_id = _param('claimed_id')
    identity = _param('identity')
    lp_is_member = _param('lp.is_member')
    mode = _param('mode')
    ns = _param('ns')
    op_endpoint = _param('op_endpoint')
    response_nonce = _param('response_nonce')
    return_to = _param('return_to')
    sig = _param('sig')
    signed = _param('signed')
    sreg_email = _param('sreg.email')
    sreg_nickname = _param('sreg.nickname')

    del _param


def _parse_openid_form(text):
    """Return the fields of an auto-submitting OpenID form.

    Consumers like Flask-OpenID and pyramid_openid answer with a page that
    carries the OpenID request in hidden inputs instead of redirecting.
    """
    parsed = bs4.BeautifulSoup(text, 'html.parser')
    if parsed.form is None:
        raise MalformedResponseError(
            'OpenID transaction page does not contain a form')
    inputs = {}
    for child in parsed.form.find_all(name='input'):
        if child.attrs.get('type') == 'submit' or 'name' not in child.attrs:
            continue
        inputs[child.attrs['name']] = child.attrs.get('value', '')
    return inputs


def _follow_redirects(session, url, timeout=None):
    """Walk the redirect chain starting at url.

    :returns: the last response and the query parameters of every url that
        was visited, later ones winning.
    """
    data = {}
    max_redirects = getattr(session, 'max_redirects', 30)
    for _hop in range(max_redirects + 1):
        data.update(query_params(url))
        response = session.get(url, allow_redirects=False, timeout=timeout)
        log.debug('GET %s -> %s', url, response.status_code)
        if response.status_code not in REDIRECT_STATI:
            return response, data
        location = response.headers.get('location')
        if not location:
            raise MalformedResponseError(
                'No redirect url provided in the headers of %s' % url)
        url = urljoin(url, location)
    raise MalformedResponseError(
        'Exceeded %s redirects while looking for the OpenID provider'
        % max_redirects)


def openid_login(session, login_url, username, password,
                 auth_url=FEDORA_OPENID_API, openid_insecure=False,
                 timeout=None):
    """ Open a session for the user.

    Log in the user with the specified username and password
    against the FAS OpenID server.

    :arg session: Requests session object required to persist the cookies
        that are created during redirects on the openid provider.
    :arg login_url: The url to the login endpoint of the application.
    :arg username: the FAS username of the user that wants to log in
    :arg password: the FAS password of the user that wants to log in
    :kwarg auth_url: The JSON API endpoint of the OpenID provider.
    :kwarg openid_insecure: If True, do not check the openid server
        certificates against their CA's.  This means that man-in-the-middle
        attacks are possible.  You might turn this option on for testing
        against a local version of a server with a self-signed certificate
        but it should be off in production.
    :kwarg timeout: Timeout in seconds for each request.
    :returns: the :class:`OpenIDParameters` sent back by the provider.
    :raises AuthError: the provider refused the credentials, or the login
        completed without the service handing out a session cookie.
    :raises MalformedResponseError: the service or the provider did not
        answer the way the OpenID flow expects.
    :raises requests.exceptions.RequestException: network problems are
        passed through untouched.

    """
    # Ask the service where to authenticate, keeping the openid request
    # parameters of every hop.
    response, data = _follow_redirects(session, login_url, timeout=timeout)

    if OPENID_TRANSACTION_TITLE in response.text:
        data.update(_parse_openid_form(response.text))

    if not any(key.startswith('openid.') for key in data):
        raise MalformedResponseError(
            'Login url %s did not lead to an OpenID provider (ended at %s)'
            % (login_url, response.url))

    # Contact openid provider
    data['username'] = username
    data['password'] = password
    data['auth_module'] = AUTH_MODULE
    data['auth_flow'] = AUTH_FLOW
    if 'openid.mode' not in data:
        data['openid.mode'] = 'checkid_setup'

    debug_data = dict(data, password='xxxxxxx')
    log.debug('POST %s: %r', auth_url, debug_data)
    response = session.post(auth_url, data=data, verify=not openid_insecure,
                            timeout=timeout)

    # The only sign of a refused login is an error page instead of JSON
    try:
        output = response.json()
    except ValueError:
        log.debug('OpenID provider answered %s with non-JSON data',
                  response.status_code)
        raise AuthError(_('Authentication failed, possibly due to wrong'
                          ' username / password.'))

    if not isinstance(output, dict) or 'success' not in output:
        raise MalformedResponseError(
            'Unexpected answer from the OpenID provider: %s'
            % to_unicode(output))

    if not output['success']:
        raise AuthError(to_unicode(output.get(
            'message', _('OpenID endpoint returned an error code.'))))

    if not isinstance(output.get('response'), dict):
        raise MalformedResponseError(
            'OpenID provider did not return the OpenID parameters')
    params = OpenIDParameters(output['response'])
    if not params.return_to:
        raise MalformedResponseError(
            'OpenID provider did not tell where to return to')

    # Hand the signed answer back to the service
    before = _cookie_values(session.cookies)
    response = session.post(params.return_to, data=dict(params),
                            allow_redirects=False, timeout=timeout)
    log.debug('POST %s -> %s', params.return_to, response.status_code)
    if not response.ok:
        raise AuthError(_('Failed to complete authentication with the'
                          ' original site.'))

    # Cookies from the login url or the provider do not make a session
    host = urlparse(params.return_to).hostname
    after = _cookie_values(session.cookies)
    handed_out = [key for key, value in after.items()
                  if before.get(key) != value and _domain_match(host, key[0])]
    if not handed_out:
        raise AuthError(_('Login finished but the service did not hand'
                          ' out a session cookie.'))

    return params


def _cookie_values(jar):
    return dict(((c.domain, c.path, c.name), c.value) for c in jar)


def _domain_match(host, domain):
    domain = domain.lstrip('.').lower()
    host = (host or '').lower()
    return host == domain or host.endswith('.' + domain)


__all__ = ('openid_login', 'OpenIDParameters', 'FEDORA_OPENID_API',
           'FEDORA_OPENID_STG_API')

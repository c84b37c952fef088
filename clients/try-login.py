#!/usr/bin/python3
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
'''
Log into a Fedora Service through the Fedora OpenID provider.

Cached session cookies are reused when they are still fresh, otherwise the
password is asked for.
'''

import getpass
import logging
import optparse
import sys

from fedora_session.client import AuthError, FedoraServiceError, OpenIdSession

LOGIN_URL = 'https://bodhi.fedoraproject.org/login'


def parse_commands():
    parser = optparse.OptionParser(usage='%prog [options]')
    parser.add_option('-u', '--username',
                      dest='username',
                      action='store',
                      default=getpass.getuser(),
                      help='FAS username to log in as')
    parser.add_option('-l', '--login-url',
                      dest='login_url',
                      action='store',
                      default=LOGIN_URL,
                      help='Login url of the service [%default]')
    parser.add_option('--staging',
                      dest='staging',
                      action='store_true',
                      default=False,
                      help='Use the staging OpenID provider')
    parser.add_option('--no-cache',
                      dest='cache_cookies',
                      action='store_false',
                      default=True,
                      help='Neither read nor write the cookie cache')
    parser.add_option('-v', '--verbose',
                      dest='verbose',
                      action='store_true',
                      default=False,
                      help='Log what is going on')
    (opts, args) = parser.parse_args()
    return opts


def open_session(opts, password=None):
    factory = OpenIdSession.staging if opts.staging else OpenIdSession
    return factory(opts.login_url, opts.username, password,
                   cache_cookies=opts.cache_cookies, debug=opts.verbose)


if __name__ == '__main__':
    options = parse_commands()
    if options.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        try:
            session = open_session(options)
        except AuthError:
            # Nothing usable in the cache
            password = getpass.getpass('FAS password: ')
            session = open_session(options, password)
    except FedoraServiceError as e:
        print('Login failed: %s' % e)
        sys.exit(1)

    if session.params:
        print('Successfully logged in as %s.' % session.params.identity)
    else:
        print('Reusing cached session cookies.')
    sys.exit(0)

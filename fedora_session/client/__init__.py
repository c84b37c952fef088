# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2013  Red Hat, Inc.
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
fedora_session.client is used to interact with Fedora Services.

.. moduleauthor:: Ricky Zhou <ricky@fedoraproject.org>
.. moduleauthor:: Luke Macken <lmacken@redhat.com>
.. moduleauthor:: Toshio Kuratomi <tkuratom@redhat.com>
'''
import errno
import os


class FedoraClientError(Exception):

    '''Base Exception for problems which originate within the Clients.

    This should be the base class for any exceptions that the Client
    generates.  For instance, if the client performs validation before
    passing the data on to the Fedora Service.

    Problems returned while talking to the Services should be returned via a
    `FedoraServiceError` instead.

    '''
    pass


class FedoraServiceError(Exception):

    '''Base Exception for any problem talking with the Service.

    When the Client gets an error talking to the server, an exception of this
    type is raised.  This can be anything from an unexpected reply of the
    OpenID provider up to an error returned from the server itself.  Network
    errors are left to :mod:`requests` and are not wrapped.

    '''
    pass


class ServerError(FedoraServiceError):

    '''Unable to talk to the server properly.

    This includes 500 response codes and replies that could not be decoded.
    If the error was generated from an http response, :attr:`code` is the
    HTTP response code.  Otherwise, :attr:`code` will be -1.

    '''
    def __init__(self, url, status, msg):
        FedoraServiceError.__init__(self)
        self.filename = url
        self.code = status
        self.msg = msg

    def __str__(self):
        return 'ServerError(%s, %s, %s)' % (self.filename, self.code, self.msg)

    def __repr__(self):
        return 'ServerError(%r, %r, %r)' % (self.filename, self.code, self.msg)


class AuthError(FedoraServiceError):

    '''Error during authentication.  For instance, invalid password.'''
    pass


class LoginRequiredError(AuthError):

    """ Exception raised when the call requires a logged-in user. """

    pass


class MalformedResponseError(FedoraServiceError):

    '''The OpenID provider or the service answered in an unexpected shape.

    This usually means that the login protocol of the remote side changed,
    not that the caller did something wrong.
    '''
    pass


class CacheUnavailableError(FedoraClientError):

    '''The on-disk cookie cache could not be used.

    Only raised inside of :mod:`fedora_session.client.cookiecache`.  The cache
    turns it into a cache miss.
    '''
    pass


class UnsafeFileError(Exception):
    def __init__(self, filename, message):
        super(UnsafeFileError, self).__init__(message)
        self.message = message
        self.filename = filename

    def __str__(self):
        return 'Unsafe file permissions! {}: {}'.format(self.filename,
                                                        self.message)


def check_file_permissions(filename, allow_notexists=False):
    if os.path.islink(filename):
        raise UnsafeFileError(filename, 'File is a symlink')
    try:
        stat = os.stat(filename)
    except OSError as e:
        if e.errno == errno.ENOENT and allow_notexists:
            return
        raise
    if stat.st_uid != os.getuid():
        raise UnsafeFileError(filename, 'File not owned by current user')
    if stat.st_mode & 0o007:
        raise UnsafeFileError(filename, 'File is world-readable')


# We want people to be able to import fedora_session.client.*Session directly
from fedora_session.client.session import (  # noqa: E402
    AnonymousSession, Session, requires_login)
from fedora_session.client.openidsession import OpenIdSession  # noqa: E402

__all__ = ('FedoraServiceError', 'ServerError', 'AuthError',
           'FedoraClientError', 'LoginRequiredError',
           'MalformedResponseError', 'CacheUnavailableError',
           'UnsafeFileError', 'check_file_permissions',
           'Session', 'AnonymousSession', 'OpenIdSession', 'requires_login')

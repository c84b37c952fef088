'''
Information about this fedora-session release
'''


NAME = 'fedora-session'
VERSION = '0.1.0'
DESCRIPTION = 'Authenticated sessions for Fedora Services using OpenID'
LONG_DESCRIPTION = '''
Fedora Services used to authenticate their users against the Fedora OpenID
provider.  This package logs into such a service, keeps the session cookies
in a small on-disk cache and hands out sessions that send those cookies with
every request.
'''
AUTHOR = 'Toshio Kuratomi, Ralph Bean, Pierre-Yves Chibon, Patrick Uiterwijk'
EMAIL = 'admin@fedoraproject.org'
COPYRIGHT = '2013-2019 Red Hat, Inc.'
URL = 'https://github.com/fedora-infra/python-fedora'
DOWNLOAD_URL = 'https://pypi.python.org/pypi/fedora-session'
LICENSE = 'LGPLv2+'

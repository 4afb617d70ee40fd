"""
Provides project-level commands. Commands are run via `python setup.py <command> [args]`

Commands available:

- apidoc: regenerate reST docs for inline pydoc comments
- autobuild: watch for changes to the reST files and rebuild the documentation, refreshing
   the browser.

Tests are run with pytest from the package root, after `pip install -e .[test]`.
"""

from setuptools import setup, Command

import os


class RunInRootCommand(Command):
    user_options = []

    def initialize_options(self):
        self.cwd = None

    def finalize_options(self):
        self.cwd = os.getcwd()

    def run(self):
        assert os.getcwd() == self.cwd, 'Must be in package root: %s' % self.cwd
        self.runcmd()

    def runcmd(self):
        pass


class ApiDocCommand(RunInRootCommand):
    description = "regenerates the API docs for the webmesh package"

    def runcmd(self):
        os.system('"sphinx-apidoc" -f -e -o docs/apidoc src/webmesh "src/webmesh/*_test.py" "src/webmesh/*/*_test.py"')


class AutoBuildCommand(RunInRootCommand):
    description = "watches the docs for changes and rebuilds them, automatically refreshing the browser page"

    def runcmd(self):
        os.system("sphinx-autobuild docs docs/_build/html -B")


setup(
    name='webmesh-connector-py',
    version='0.0.1',
    description='Keeps a local, polled view of the connections managed by a webmesh daemon.',
    url='',
    author='',
    author_email='',
    license='LGPL',
    package_dir={'': 'src'},
    packages=['webmesh', 'webmesh.config', 'webmesh.daemon', 'webmesh.support'],
    package_data={'webmesh': ['*.cfg'], 'webmesh.config': ['*.cfg']},
    python_requires='>=3.8',
    install_requires=[
        'configobj',
        'httpx',
    ],
    extras_require={
        'test': [
            'pytest',
            'PyHamcrest',
            'timeout-decorator',
        ],
    },
    zip_safe=False,
    cmdclass={
        'apidoc': ApiDocCommand,
        'autobuild': AutoBuildCommand
    }
)

import logging
import os
import platform

from configobj import ConfigObj, ConfigObjError, Section, flatten_errors
from validate import Validator

logger = logging.getLogger(__name__)

# The default extension for configuration files
config_extension = '.cfg'


def config_flavor(name, flavor=None):
    """
    >>> config_flavor('webmesh', 'default')
    'webmesh.default'
    """
    return name if not flavor else name + '.' + flavor


def config_filename(name, directory):
    """
    Determines the location of a config file in the given directory.
    """
    return os.path.join(directory, name + config_extension)


def load_config_file_base(file, must_exist=True):
    """
    Loads a configuration file
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an exception is thrown.
    :return: The ConfigObj instance for the file.
    """
    try:
        return ConfigObj(file, interpolation='Template', file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def config_flavor_file(name, directory, subpart=None) -> ConfigObj:
    """
    Loads a specialization of a config file. The configuration file is expected to be named
    after the base, followed by a period and then the specialization, if the specialization is given,
    otherwise just the base name. A missing file loads as an empty configuration.
    """
    file = config_filename(config_flavor(name, subpart), directory)
    return load_config_file_base(file, False)


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name("Darwin")
    'osx'
    """
    name = name.lower()
    if name == 'darwin':
        name = 'osx'
    return name


def os_name():
    return map_os_name(platform.system())


def load_config(name, directory, user_directory='~'):
    """
        Loads all the configuration files that relate to the given name.
        Configurations are merged in this order, later files overriding earlier ones:
        - the default specialization
        - the platform specialization
        - the user override, in the user directory
        - the base configuration
        The merged configuration is validated against the "schema" specialization, which also supplies
        defaults and converts values to their declared types.
    :param directory: the location of the configuration files
    :param user_directory: the location of the user override
    :return: the validated ConfigObj
    """
    user_file = config_filename(name, os.path.expanduser(user_directory))
    schema_file = config_filename(config_flavor(name, 'schema'), directory)
    config = ConfigObj(configspec=schema_file if os.path.exists(schema_file) else None)
    config.merge(config_flavor_file(name, directory, 'default'))
    config.merge(config_flavor_file(name, directory, os_name()))
    config.merge(load_config_file_base(user_file, must_exist=False))
    config.merge(config_flavor_file(name, directory))

    if config.configspec is None:
        return config
    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        failures = ['.'.join(sections + [key or '']) for sections, key, _ in flatten_errors(config, result)]
        raise ConfigObjError("the config file %s failed validation %s" % (name, ', '.join(failures)))
    logger.debug("loaded configuration %s from %s" % (name, directory))
    return config


def fetch_conf_path(conf: Section, path):
    """
    Retrieves the named configuration section
    :param conf:        The root configuration
    :param path:        An iterable that lists the names of the sections to descend through
    :return: The configuration section identified by the path, or None
    """
    for p in path:
        conf = conf.get(p, None)
        if conf is None:
            return None
    return conf


def apply_conf_path(conf: Section, name_parts, target):
    """
    Applies the configuration section at a path to a given target object
    :return: True if the section exists and was applied
    """
    conf = fetch_conf_path(conf, name_parts)
    if conf:
        apply_conf(conf, target)
        return True
    return False


def apply_conf(conf: Section, target):
    """
    Applies the values contained in a configuration section to a target object.
    Only attributes the target already has are set; other values are ignored.
    """
    for k, v in conf.items():
        if hasattr(target, k):
            setattr(target, k, v)

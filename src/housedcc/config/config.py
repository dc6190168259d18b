import os
import platform

from configobj import ConfigObj, ConfigObjError, Section, flatten_errors
from validate import Validator

# The default extension for configuration files
config_extension = '.cfg'

# the configuration files shipped with the package
default_directory = os.path.dirname(__file__)


def config_flavor(name, flavor=None):
    configname = name if not flavor else name + '.' + flavor
    return configname


def config_filename(name, directory=None):
    """
    Determines the location of a config file in the given directory.
    """
    config_file = os.path.join(directory or default_directory, name + config_extension)
    return config_file


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
    otherwise just the base name.
    :param name:    The name of the base configuration
    :param subpart: The name of the specialization.
    :return: The ConfigObj for the configuration file, empty when there is no such file.
    """
    configname = config_flavor(name, subpart)
    file = config_filename(configname, directory)
    config = load_config_file_base(file, False)
    return config


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


def load_config(name, directory=None, override=None, defaults=default_directory):
    """
        Loads all the configuration files that relate to the given name.
        Configurations are loaded in this order, later files overriding earlier ones:
        - the default specialization, shipped in the defaults directory
        - the platform specialization
        - the user configuration in the home directory
        - the base configuration in the given directory
        - the override file, when given
        The configurations are flattened into a single configuration, and then validated
        against the "schema" specialization found in the defaults directory.
    :param directory: the location of the local configuration file
    :param override: the path of a configuration file that must exist
    :return: the validated configuration, with values converted to their schema types.
    """
    schema = config_filename(config_flavor(name, 'schema'), defaults)
    config = ConfigObj(configspec=schema) if os.path.exists(schema) else ConfigObj()
    config.merge(config_flavor_file(name, defaults, 'default'))
    config.merge(config_flavor_file(name, defaults, os_name()))
    config.merge(load_config_file_base(os.path.expanduser(
        '~/' + name + config_extension), must_exist=False))
    if directory:
        config.merge(config_flavor_file(name, directory))
    if override:
        config.merge(load_config_file_base(override))

    if config.configspec is None:
        return config
    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        raise ConfigObjError("the config file %s failed validation: %s" % (name, describe_errors(config, result)))
    return config


def describe_errors(config, result):
    """
    Lists the keys and sections that failed validation.
    """
    errors = []
    for section_list, key, error in flatten_errors(config, result):
        section = '/'.join(section_list) or 'top level'
        if key is None:
            errors.append('section %s is missing' % section)
        else:
            errors.append('%s in %s: %s' % (key, section, error or 'missing'))
    return ', '.join(errors)


def fetch_conf_path(conf: Section, path):
    """
    Retrieves the named configuration section
    :param conf:        The root configuration
    :param path:        An iterable that lists the names of the sections to resolve,
                        or a single string of names separated by '.'
    :return: The configuration section identified by the path, None when it does not exist.
    """
    if isinstance(path, str):
        path = path.split('.')
    for p in path:    # lookup specific section
        conf = conf.get(p, None)
        if conf is None:
            return
    return conf


def apply_conf_path(conf: Section, name_parts, target):
    """
    Applies a configuration path to a given target object
    :param conf:        The root configuration object
    :param name_parts:  The path of the configuration to apply
    :param target:      The target object that receives the configured values
    :return: True when the section exists.
    """
    conf = fetch_conf_path(conf, name_parts)
    if conf is None:
        return False
    apply_conf(conf, target)
    return True


def apply_conf(conf: Section, target):
    """
    Applies the attributes contained in a configuration object to a target object.
    It does this by iterating over the items in the configuration and setting any attributes with the same name.
    Subsections are not applied.
    :param conf:
    :param target:
    :return:
    """
    for k, v in conf.items():
        if not isinstance(v, Section) and hasattr(target, k):
            setattr(target, k, v)

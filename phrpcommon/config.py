# Copyright (C) 2025  Technische Universitaet Berlin
#
# This library is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 3 of the License, or (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301
# USA

"""Configuration for normalising peptide hit results."""
import json
import yaml
import re
import copy
from memoized_property import memoized_property
from pyteomics import cmass

from phrpcommon.errors import ParameterFileError

# Unique sentinel, used to allow None to be a valid default for a setting.
NO_DEFAULT = object()


def stringhash(s):
    """
    Create a stable hash code for strings.

    hash(str) is salted per interpreter process, so it can not be used for anything that
    needs to be comparable between runs.
    """
    return hash(tuple(ord(x) for x in s))


class Setting:
    """A setting supported by the config system."""

    def __init__(self, type, default=NO_DEFAULT, valid_values=None, required=True,
                 max_value=None, min_value=None):
        """
        Initialise the Setting.

        :param type: Python type expected for this setting.
        :param default: Default value for this setting.
        :param valid_values: Tuple of accepted values, re pattern, or None to accept any value.
        :param required: (bool) Whether the setting has to be given if it has no default.
        :param max_value: Exclusive upper bound of the setting (for float or int types)
        :param min_value: Inclusive lower bound of the setting (for float or int types)
        """
        self.type = type
        self.valid_values = valid_values
        numeric = any([issubclass(self.type, int), issubclass(self.type, float)])
        if (max_value is not None or min_value is not None) and not numeric:
            raise TypeError("max_value and min_value are only supported for int and float type.")
        self.max_value = max_value
        self.min_value = min_value
        if default is not NO_DEFAULT:
            try:
                self.default = self.accept(default)
            except TypeError:
                raise TypeError("Default '%s' is not valid and could not be coerced "
                                "into the expected type (%s)" % (repr(default),
                                                                 repr(self.type))) from None
            self.required = False
        else:
            self.required = required

    def accept(self, value):
        """
        Coerce a value and check that it is valid.

        :param value: (mixed) value to check
        :return: (mixed) the coerced value
        :raises ValueError: if the value is outside the accepted range or values
        """
        coerced_value = self.coerce(value)
        if self.max_value is not None and coerced_value >= self.max_value:
            raise ValueError(f'{coerced_value} is above max_value({self.max_value})!')
        if self.min_value is not None and coerced_value < self.min_value:
            raise ValueError(f'{coerced_value} is below min_value({self.min_value})!')
        if self.valid_values is not None:
            if isinstance(self.valid_values, re.Pattern):
                if self.valid_values.match(coerced_value) is None:
                    raise ValueError(f'{coerced_value} is not valid!'
                                     f' Valid values need to match: {self.valid_values.pattern}')
            elif coerced_value not in self.valid_values:
                raise ValueError(f'{coerced_value} is not valid!'
                                 f' Valid values are: {self.valid_values}')
        return coerced_value

    def coerce(self, value):
        """
        Coerce a value into the correct type.

        :param value: (mixed) value to coerce
        :return: (mixed) coerced value
        """
        if isinstance(value, self.type):
            return value
        try:
            if isinstance(value, dict):
                return self.type(**value)
            elif isinstance(value, str) and value in self.type.__dict__:
                # named presets defined as class attributes (e.g. CleavageRule.trypsin)
                return self.type.__dict__[value]
            else:
                return self.type(value)
        except ValueError:
            raise TypeError from None

    def hash(self, value):
        """
        Create a hash for a value.

        :param value: (mixed) value to create hash for
        :return: (int) hash of the value
        """
        if issubclass(self.type, ConfigGroup):
            return value.hash()
        elif issubclass(self.type, str):
            return stringhash(value)
        else:
            return hash(value)


class ListSetting(Setting):
    """A Setting with a list of values supported by the config system."""

    def accept(self, values):
        """
        Coerce and check all elements of the ListSetting.

        A single value is accepted as a list with one element.

        :param values: (list) values to check
        :return: (list) coerced values
        """
        if not isinstance(values, list):
            values = [values]

        if isinstance(self.type, Setting):
            return [self.type.accept(value) for value in values]
        return [super(ListSetting, self).accept(value) for value in values]

    def hash(self, value):
        """
        Create a hash.

        :return: (int) hash
        """
        if isinstance(self.type, Setting):
            return hash(tuple(self.type.hash(x) for x in value))
        elif issubclass(self.type, ConfigGroup):
            return hash(tuple(x.hash() for x in value))
        elif issubclass(self.type, str):
            return hash(tuple(stringhash(x) for x in value))
        else:
            return hash(tuple(value))


class ConfigMeta(type):
    """Metaclass used to define configuration groups."""

    def __new__(cls, name, bases, attributes):
        """Create a new instance."""
        settings = {k: a for k, a in attributes.items() if isinstance(a, Setting)}
        others = {k: a for k, a in attributes.items() if k not in settings}
        defaults = {k: s.default for k, s in settings.items() if hasattr(s, 'default')}
        required = set([k for k, s in settings.items() if s.required])
        new_attributes = dict(_settings=settings, _defaults=defaults, _required=required,
                              **others)
        return type.__new__(cls, name, bases, new_attributes)


class ConfigGroup(metaclass=ConfigMeta):
    """Base class for configuration groups."""

    def __init__(self, **kwargs):
        """Initialise the ConfigGroup."""
        self._values = {}
        for key, value in kwargs.items():
            if key not in self._settings:
                raise KeyError("Unknown setting '%s'" % key)
            setattr(self, key, value)

        # transfer defaults to those values that are not set explicitly
        for k, v in self._defaults.items():
            if k not in kwargs.keys():
                setattr(self, k, copy.deepcopy(v))

        for setting in self._required:
            if setting not in kwargs.keys():
                raise AttributeError("'%s' is required but not defined" % setting) from None

    def __setattr__(self, key, value):
        """Set the value of a Setting."""
        if key.startswith('_') or key not in self._settings:
            super(ConfigGroup, self).__setattr__(key, value)
            return
        setting = self._settings[key]
        try:
            self._values[key] = setting.accept(value)
        except TypeError:
            raise TypeError("Value '%s' is not valid for '%s' and could not be coerced "
                            "into the expected type (%s)" % (repr(value), key,
                                                             repr(setting.type))) from None
        except ValueError as e:
            raise ValueError("Value '%s' is not valid for '%s': %s" % (repr(value), key,
                                                                       e)) from None

    def __contains__(self, key):
        """Check if a Setting is configured in the ConfigGroup."""
        return key in self._settings

    def __getattr__(self, key):
        """Get the value for a Setting."""
        if key.startswith('_') or key not in self._settings:
            raise AttributeError(key)
        elif key in self._values:
            return self._values[key]
        else:
            raise AttributeError(key)

    def __eq__(self, other):
        """Check if two ConfigGroups are equal."""
        if type(other) is type(self):
            return self._values == other._values
        return False

    def hash(self):
        """
        Create a hash.

        :return: (int) hash
        """
        value_hashes = [(stringhash(name), self._settings[name].hash(value))
                        for name, value in self._values.items()]
        return hash(frozenset(value_hashes))

    @classmethod
    def from_json(cls, json_string):
        """Create a ConfigGroup from a JSON string."""
        args = json.loads(json_string)
        return cls(**args)

    @classmethod
    def from_yaml(cls, yaml_string):
        """Create a ConfigGroup from a YAML string."""
        args = yaml.safe_load(yaml_string) or {}
        return cls(**args)

    def to_dict(self, excl_defaults=True):
        """
        Convert the ConfigGroup to a dictionary.

        :param excl_defaults: (bool) exclude default values
        :return: (dict) dictionary representation of the ConfigGroup, None if empty
        """
        values = {}
        for k, value in self._values.items():
            if isinstance(value, ConfigGroup):
                value_tmp = value.to_dict(excl_defaults=excl_defaults)
            elif isinstance(value, list):
                value_tmp = [v.to_dict(excl_defaults=False) if isinstance(v, ConfigGroup) else v
                             for v in value]
            else:
                value_tmp = value

            if value_tmp is None:
                continue
            # only keep if not default value (if set)
            if not excl_defaults or k not in self._defaults or self._defaults[k] != value:
                values[k] = value_tmp

        if len(values) == 0:
            return None
        return values

    def to_json(self, excl_defaults=True):
        """Convert the ConfigGroup to a JSON string."""
        return json.dumps(self.to_dict(excl_defaults=excl_defaults))

    def write(self, file_name, excl_defaults=True):
        """Write the ConfigGroup to a JSON file."""
        with open(file_name, "w") as outfile:
            json.dump(self.to_dict(excl_defaults=excl_defaults), outfile, indent='\t')

    def write_yaml(self, file_name, excl_defaults=True):
        """Write the ConfigGroup to a YAML file."""
        with open(file_name, "w") as outfile:
            yaml.dump(self.to_dict(excl_defaults=excl_defaults), outfile)


class CleavageRule(ConfigGroup):
    """
    Cleavage specificity of an enzyme (or chemical cleavage agent).

    A peptide bond between a left and a right residue is considered cleavable if the left
    residue matches left_residue_regex and the right one matches right_residue_regex.
    """

    """Name of the cleavage agent"""
    name = Setting(str)

    """Regular expression for the residue N-terminal of the cleavage site"""
    left_residue_regex = Setting(str, '[KR]')

    """Regular expression for the residue C-terminal of the cleavage site"""
    right_residue_regex = Setting(str, '[^P]')

    def __init__(self, **kwargs):
        """Translate empty and generic residue patterns into explicit character classes."""
        super().__init__(**kwargs)
        self.left_residue_regex = self._translate(self.left_residue_regex)
        self.right_residue_regex = self._translate(self.right_residue_regex)

    @staticmethod
    def _translate(pattern):
        if pattern in ('', 'X', '[X]'):
            return '[A-Z]'
        if pattern == '[^X]':
            return '[^A-Z]'
        return pattern

    @memoized_property
    def left_regex(self):
        """Compiled left residue pattern."""
        return re.compile(self.left_residue_regex, re.IGNORECASE)

    @memoized_property
    def right_regex(self):
        """Compiled right residue pattern."""
        return re.compile(self.right_residue_regex, re.IGNORECASE)

    @property
    def is_standard_trypsin(self):
        """True if the rule is the classic trypsin rule (after K or R but not before P)."""
        return self.left_residue_regex == '[KR]' and self.right_residue_regex == '[^P]'


CleavageRule.trypsin = CleavageRule(name='trypsin')
CleavageRule.trypsin_without_proline_rule = CleavageRule(
    name='trypsin_without_proline_rule', left_residue_regex='[KR]', right_residue_regex='[A-Z]')
CleavageRule.trypsin_plus_fvley = CleavageRule(
    name='trypsin_plus_fvley', left_residue_regex='[KRFYVEL]', right_residue_regex='[A-Z]')
CleavageRule.chymotrypsin = CleavageRule(
    name='chymotrypsin', left_residue_regex='[FWYL]', right_residue_regex='[A-Z]')
CleavageRule.chymotrypsin_and_trypsin = CleavageRule(
    name='chymotrypsin_and_trypsin', left_residue_regex='[FWYLKR]', right_residue_regex='[A-Z]')
CleavageRule.glu_c = CleavageRule(
    name='glu_c', left_residue_regex='[ED]', right_residue_regex='[A-Z]')
CleavageRule.cyan_br = CleavageRule(
    name='cyan_br', left_residue_regex='[M]', right_residue_regex='[A-Z]')
CleavageRule.endo_arg_c = CleavageRule(
    name='endo_arg_c', left_residue_regex='[R]', right_residue_regex='[A-Z]')
CleavageRule.endo_lys_c = CleavageRule(
    name='endo_lys_c', left_residue_regex='[K]', right_residue_regex='[A-Z]')
CleavageRule.endo_asp_n = CleavageRule(
    name='endo_asp_n', left_residue_regex='[A-Z]', right_residue_regex='[D]')


class Modification(ConfigGroup):
    """Definition of a modification that search results can carry."""

    def __init__(self, **kwargs):
        """Initialise the Modification, deriving the mass from the composition if needed."""
        if 'mass' not in kwargs and 'composition' in kwargs:
            kwargs['mass'] = cmass.calculate_mass(formula=kwargs['composition'])
        super().__init__(**kwargs)
        if 'mass' not in self._values:
            raise AttributeError("either 'mass' or 'composition' has to be given for "
                                 "modification '%s'" % self.mass_correction_tag)

    """Short name identifying the mass of the modification, e.g. Plus1Oxy"""
    mass_correction_tag = Setting(str)

    """One character symbol of the modification ('-' if the modification has no symbol)"""
    symbol = Setting(str, '-', valid_values=re.compile('^.$'))

    """Mass shift in Dalton"""
    mass = Setting(float, required=False)

    """Chemical composition of the modification as a string, e.g. C2H2O1"""
    composition = Setting(str, required=False)

    """
    Residues that can carry the modification, in one letter code. Terminal modifications use
    '<' (peptide N-terminus), '>' (peptide C-terminus), '[' (protein N-terminus) and
    ']' (protein C-terminus).
    """
    target_residues = Setting(str, '')

    """
    type of modification:
        - dynamic: both modified and unmodified versions exist
        - static: applied to every matching residue
        - terminal_peptide_static: static modification of a peptide terminus
        - isotopic: isotopic label applied to the whole peptide
        - protein_terminus_static: static modification of a protein terminus
        - unknown
    """
    type = Setting(str, 'dynamic', valid_values=('dynamic', 'static', 'terminal_peptide_static',
                                                 'isotopic', 'protein_terminus_static',
                                                 'unknown'))

    """Atom affected by isotopic modifications ('-' for none)"""
    affected_atom = Setting(str, '-', valid_values=re.compile('^.$'))


class MappingValidationConfig(ConfigGroup):
    """Thresholds for accepting a peptide to protein mapping file."""

    """
    Maximum percentage (0 - 100) of peptides that may have no protein match. Files reaching
    this value are rejected.
    """
    max_error_percent = Setting(float, 0.1, min_value=0)

    """Percentage of unmatched peptides at which an accepted file is reported as warning"""
    warn_percent = Setting(float, 0, min_value=0)

    """Accept mapping files regardless of their error rate"""
    ignore_errors = Setting(bool, False)


class DatasetNameConfig(ConfigGroup):
    """Settings for abbreviating dataset names in multi-dataset runs."""

    """Abbreviated names are extended by further name parts until they reach this length"""
    min_length = Setting(int, 12, min_value=0)

    """Name parts are not added once they would make the abbreviated name longer than this"""
    max_length = Setting(int, 25, min_value=0)

    """Explicit base name for combined output files"""
    output_file_base_name = Setting(str, '')


class Config(ConfigGroup):
    """Top level configuration for normalising search results."""

    def __init__(self, **kwargs):
        """Initialise the Config and check that the settings are consistent."""
        super().__init__(**kwargs)

        tags = [m.mass_correction_tag for m in self.modifications]
        if len(set(tags)) != len(tags):
            raise ValueError("mass_correction_tag of modifications must be unique")

        if 0 < self.dataset_names.max_length < self.dataset_names.min_length:
            raise ValueError("dataset_names.max_length should not be smaller than "
                             "dataset_names.min_length!")

    """Cleavage rule used to derive cleavage states"""
    cleavage_rule = Setting(CleavageRule, CleavageRule.trypsin)

    """Known modifications"""
    modifications = ListSetting(Modification, [])

    """Number of decimals that are compared when looking up modifications by mass"""
    mod_mass_digits = Setting(int, 3, min_value=0)

    """Peptide to protein map validation settings"""
    mapping_validation = Setting(MappingValidationConfig, MappingValidationConfig())

    """Dataset name abbreviation settings"""
    dataset_names = Setting(DatasetNameConfig, DatasetNameConfig())

    """Create the _ProteinMods.txt file"""
    create_protein_mods_file = Setting(bool, True)

    """Write rows for proteins that are reversed or scrambled into the _ProteinMods.txt file"""
    protein_mods_include_reversed = Setting(bool, False)

    """Reuse an already existing merged peptide to protein map file"""
    use_existing_pep_to_protein_map = Setting(bool, False)

    """Number of occurrences of a repeated warning that are always shown"""
    periodic_warning_threshold = Setting(int, 10, min_value=0)

    """First ID handed out to a unique sequence"""
    initial_unique_seq_id = Setting(int, 1, min_value=1)


class ConfigReader:
    """Config Reader class."""

    @classmethod
    def load_file(cls, file_name):
        """Open a file by filename and create a Config from it."""
        try:
            with open(file_name) as f:
                if file_name.lower().endswith('.json'):
                    return cls.load_json(f)
                elif file_name.lower().endswith('.yaml') or file_name.lower().endswith('.yml'):
                    return cls.load_yaml(f)
                else:
                    # Guess format (JSON is valid YAML)
                    return cls.load_yaml(f)
        except OSError as e:
            raise ParameterFileError("Could not read parameter file %s: %s" % (file_name, e)) \
                from e

    @classmethod
    def load_json(cls, file_obj):
        """Create a Config from a JSON file."""
        try:
            settings = json.load(file_obj)
        except ValueError as e:
            raise ParameterFileError("Invalid JSON parameter file: %s" % e) from e
        return cls._create(settings)

    @classmethod
    def load_yaml(cls, file_obj):
        """Create a Config from a YAML file."""
        try:
            settings = yaml.safe_load(file_obj)
        except yaml.YAMLError as e:
            raise ParameterFileError("Invalid YAML parameter file: %s" % e) from e
        return cls._create(settings)

    @classmethod
    def loads_json(cls, s):
        """Create a Config from a JSON string."""
        try:
            settings = json.loads(s)
        except ValueError as e:
            raise ParameterFileError("Invalid JSON parameters: %s" % e) from e
        return cls._create(settings)

    @classmethod
    def loads_yaml(cls, s):
        """Create a Config from a YAML string."""
        try:
            settings = yaml.safe_load(s)
        except yaml.YAMLError as e:
            raise ParameterFileError("Invalid YAML parameters: %s" % e) from e
        return cls._create(settings)

    @staticmethod
    def _create(settings):
        if settings is None:
            settings = {}
        if not isinstance(settings, dict):
            raise ParameterFileError("Parameters must be a mapping of setting names to values")
        try:
            return Config(**settings)
        except (KeyError, AttributeError, TypeError, ValueError) as e:
            raise ParameterFileError(str(e)) from e

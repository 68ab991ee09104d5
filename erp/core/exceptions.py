"""Business-rule failures raised by service functions and mapped to HTTP 400 by the views"""


class BusinessRuleError(Exception):
    """A request that is well-formed but not allowed by the current state of the data"""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code or 'business_rule'

    def as_response_data(self):
        return {'error': self.message, 'code': self.code}


class InvalidTransition(BusinessRuleError):
    def __init__(self, entity, current, target, allowed=()):
        self.entity = entity
        self.current = current
        self.target = target
        self.allowed = tuple(allowed)
        super().__init__(
            f"{entity} cannot move from '{current}' to '{target}'",
            code='invalid_transition',
        )

    def as_response_data(self):
        data = super().as_response_data()
        data['allowed'] = list(self.allowed)
        return data


class ConversionError(BusinessRuleError):
    def __init__(self, message):
        super().__init__(message, code='conversion_not_allowed')


class TaxSettingsMissing(BusinessRuleError):
    def __init__(self):
        super().__init__(
            'Tax settings not found. Configure the active tax rates before creating budgets.',
            code='tax_settings_missing',
        )

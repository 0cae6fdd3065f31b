"""表单数据预处理."""

from crudcore.forms.middleware import extract_form_data, register_form_middleware

__all__ = ["extract_form_data", "register_form_middleware"]

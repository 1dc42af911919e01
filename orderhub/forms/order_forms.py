"""
Forms for order submission.
"""
from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional, Regexp

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


class NewRetailerForm(FlaskForm):
    """Contact fields for a retailer created while placing an order."""

    name = StringField(
        'Business name',
        validators=[
            DataRequired(message='Retailer name is required'),
            Length(max=200)
        ]
    )

    email = StringField(
        'Email',
        validators=[
            DataRequired(message='Retailer email is required'),
            Regexp(EMAIL_PATTERN, message='Invalid email address'),
            Length(max=255)
        ]
    )

    phone = StringField('Phone', validators=[Optional(), Length(max=50)])

    address = TextAreaField('Store address', validators=[Optional(), Length(max=500)])

    def first_error(self):
        for errors in self.errors.values():
            if errors:
                return errors[0]
        return None

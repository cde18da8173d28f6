"""Input forms for the identity service."""

from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length, Regexp

from pictureit.forms import JSONForm, lower, strip

USERNAME_PATTERN = r'^[A-Za-z][A-Za-z0-9_-]{2,255}\Z'


class RegistrationForm(JSONForm):
    """Registration of a new user."""

    wire_names = {'first_name': 'firstName', 'last_name': 'lastName'}

    username = StringField('Username', validators=[
        DataRequired(),
        Regexp(USERNAME_PATTERN,
               message='Must start with a letter and contain 3-256'
                       ' letters, digits, underscores or hyphens')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(), Length(min=10, max=256)
    ])
    first_name = StringField('First name', filters=[strip],
                             validators=[DataRequired(), Length(max=255)])
    last_name = StringField('Last name', filters=[strip],
                            validators=[DataRequired(), Length(max=255)])
    email = StringField('Email', filters=[strip, lower], validators=[
        DataRequired(), Email(check_deliverability=False), Length(max=255)
    ])


class LoginForm(JSONForm):
    """Username and password."""

    username = StringField('Username', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])

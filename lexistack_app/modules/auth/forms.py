# File: lexistack_app/modules/auth/forms.py
# Forms for login and registration, filled from JSON bodies by Flask-WTF.

from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, StringField
from wtforms.validators import DataRequired, EqualTo, Length, Optional, Regexp, ValidationError

from lexistack_app.models import User


class ApiForm(FlaskForm):
    """Base for JSON forms; CSRFProtect already checks the request header."""

    class Meta:
        csrf = False


class LoginForm(ApiForm):
    username = StringField('Username', validators=[DataRequired(message='Please enter your username.')])
    password = PasswordField('Password', validators=[DataRequired(message='Please enter your password.')])
    remember_me = BooleanField('Remember me')


class RegistrationForm(ApiForm):
    username = StringField('Username', validators=[
        DataRequired(message='Please choose a username.'),
        Length(min=3, max=80),
    ])
    email = StringField('Email', validators=[
        Optional(),
        Length(max=120),
        Regexp(r'^[^@\s]+@[^@\s]+\.[^@\s]+$', message='Please enter a valid email address.'),
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Please choose a password.'),
        Length(min=6, message='The password must be at least 6 characters long.'),
    ])
    password2 = PasswordField('Repeat password', validators=[
        DataRequired(message='Please confirm the password.'),
        EqualTo('password', message='Passwords do not match.'),
    ])

    def validate_username(self, username):
        if User.query.filter_by(username=username.data).first() is not None:
            raise ValidationError('This username is already taken.')

    def validate_email(self, email):
        if email.data and User.query.filter_by(email=email.data).first() is not None:
            raise ValidationError('This email is already registered.')

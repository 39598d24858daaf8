# File: lexistack_app/modules/auth/routes.py
from flask import current_app
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from lexistack_app.core.error_handlers import AuthenticationError, ValidationError, success_response

from . import auth_bp
from .forms import LoginForm, RegistrationForm
from .services.auth_service import AuthService


@auth_bp.route('/register', methods=['POST'])
def register():
    form = RegistrationForm()
    if not form.validate():
        raise ValidationError('Registration failed', errors=form.errors)
    user = AuthService.register_user(form.username.data, form.email.data, form.password.data)
    login_user(user)
    return success_response(user.to_dict(), message='Account created'), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate():
        raise ValidationError('Login failed', errors=form.errors)
    user = AuthService.authenticate_user(form.username.data, form.password.data)
    if user is None:
        current_app.logger.info(f"Failed login attempt for '{form.username.data}'")
        raise AuthenticationError('Invalid username or password')
    login_user(user, remember=form.remember_me.data)
    return success_response(user.to_dict(), message='Logged in')


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return success_response(message='Logged out')


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return success_response(current_user.to_dict())


@auth_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    return success_response({'csrf_token': generate_csrf()})

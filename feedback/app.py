# TDX Feedback App
# Feedback collection endpoint with optional TDX ticket creation

import sys
import os

# Add parent directory to path for package imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, request, jsonify

from tdx_feedback import (
    Configuration,
    Feedback,
    FeedbackStore,
    TicketCreator,
    __version__
)

USER_EMAIL_HEADER = 'X-Authenticated-User-Email'

THANK_YOU = 'Thank you for your feedback.'
THANK_YOU_TICKET_CREATED = 'Thank you for your feedback. A support ticket has been created.'
THANK_YOU_TICKET_FAILED = 'Thank you for your feedback. (Ticket creation failed.)'

app = Flask(__name__)

# Resolved once at startup; rebuild and reassign to pick up new settings
config = Configuration.from_env()
config.validate()

ticket_creator = TicketCreator(config)
feedback_store = FeedbackStore()


def get_current_user_email():
    """Email of the authenticated user, as set by the upstream auth proxy"""
    email = request.headers.get(USER_EMAIL_HEADER, '').strip()
    return email or None


# Swap for the host's own lookup; returns an email or None
user_loader = get_current_user_email


@app.route('/feedbacks', methods=['POST'])
def create_feedback():
    """Store feedback and raise a TDX ticket for it.

    Accepts:
        - feedback.message: Required feedback text
        - feedback.context: Optional page/context details

    Returns:
        - success, message, feedback_id, ticket_id
    """
    user_email = user_loader()
    if config.require_authentication and not user_email:
        return jsonify({'error': 'Authentication required'}), 401

    try:
        data = request.get_json(silent=True) or {}
        params = data.get('feedback', data) if isinstance(data, dict) else None

        if not isinstance(params, dict):
            return jsonify({'error': 'No feedback provided'}), 400

        feedback = Feedback(message=params.get('message'), context=params.get('context'))
        errors = feedback.validate()

        if errors:
            return jsonify({'success': False, 'errors': errors}), 422

        feedback_store.save(feedback)

        # Ticket failures never fail the submission
        ticket_id = None
        if config.enable_ticket_creation:
            result = ticket_creator.call(feedback, requestor_email=user_email)
            if result.success:
                ticket_id = result.ticket_id
                message = THANK_YOU_TICKET_CREATED
            else:
                app.logger.warning(f"TDX ticket creation failed: {result.error}")
                message = THANK_YOU_TICKET_FAILED
        else:
            message = THANK_YOU

        return jsonify({
            'success': True,
            'message': message,
            'feedback_id': feedback.id,
            'ticket_id': ticket_id
        }), 201

    except Exception as e:
        return jsonify({
            'error': 'Internal server error',
            'details': str(e)
        }), 500


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'TDX Feedback',
        'version': __version__,
        'ticketCreation': config.enable_ticket_creation
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)

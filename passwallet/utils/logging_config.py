import logging
import json
from logging.config import dictConfig

class CustomJSONFormatter(logging.Formatter):
    """Format logs as JSON for better parsing by log systems."""
    
    def format(self, record):
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'name': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }
        
        if hasattr(record, 'request_id'):
            log_data['request_id'] = record.request_id
        
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)
            
        return json.dumps(log_data)

def configure_logging(app):
    """Configure logging for the wallet service."""
    log_level = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
    log_format = app.config.get('LOG_FORMAT', 'standard')
    
    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'json' if log_format == 'json' else 'standard',
            'level': log_level
        }
    }
    
    log_file = app.config.get('LOG_FILE')
    if log_file:
        handlers['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'json',
            'filename': log_file,
            'maxBytes': 10485760,  # 10 MB
            'backupCount': 5,
            'level': log_level
        }
    
    dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'json': {
                '()': CustomJSONFormatter
            },
            'standard': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            }
        },
        'handlers': handlers,
        'loggers': {
            'werkzeug': {
                'level': 'WARNING',
                'handlers': ['console'],
                'propagate': False
            }
        },
        'root': {
            'level': log_level,
            'handlers': list(handlers)
        }
    })
